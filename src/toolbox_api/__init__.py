"""Toolbox API - Excel workbook generation and web page reading service."""

__version__ = "0.1.0"

from toolbox_api.api import app, create_app  # noqa: E402

__all__ = ["app", "create_app"]


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from toolbox_api.config import settings

    uvicorn.run(
        "toolbox_api.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
