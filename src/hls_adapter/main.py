"""FastAPI application entrypoint for the HLS playlist adapter."""
from __future__ import annotations

from typing import Final

from fastapi import FastAPI

from hls_adapter.core.config import get_settings, Settings
from hls_adapter.core.logging_cfg import setup_logging
from hls_adapter.api.http import router as edge_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Notes
    -----
    - ``/health`` is registered before the catch-all edge router so it is never
      forwarded to the origin.
    - Logging is configured up front based on settings; settings are loaded once.

    Returns
    -------
    FastAPI
        The configured FastAPI application.
    """

    settings: Settings = get_settings()
    setup_logging(settings.debug)

    app: FastAPI = FastAPI(title=settings.app_name)

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        """Health check endpoint.

        Notes
        -----
        - Lightweight liveness check; does not contact the origin or the DDR.

        Returns
        -------
        dict[str, str]
            Status plus the configured upstream addresses.
        """

        return {"status": "ok", "origin": settings.origin_url, "ddr": settings.ddr_url}

    app.include_router(edge_router)
    return app


app: Final[FastAPI] = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hls_adapter.main:app", host="127.0.0.1", port=8000, reload=True)
