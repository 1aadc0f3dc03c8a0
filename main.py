"""
Root entrypoint: run with:
    JWT_SECRET_KEY=... uvicorn main:app
    or:  uv run uvicorn main:app --reload

The process refuses to start without JWT_SECRET_KEY.
"""

from app.core.config import settings
from app.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
