"""Standalone server entry point for rasterfx.

Run:
    python -m rasterfx.standalone

Environment variables:
    RASTERFX_HOST, RASTERFX_PORT: Bind address (default: 0.0.0.0:3001)
"""

from fastapi import FastAPI

from .api import create_api_app
from .config import settings


def create_standalone_app() -> FastAPI:
    """Create a FastAPI application with the API mounted at /api."""
    app = FastAPI(title="rasterfx")
    app.mount("/api", create_api_app())
    return app


def main():
    """Run the standalone server."""
    import uvicorn

    uvicorn.run(create_standalone_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
