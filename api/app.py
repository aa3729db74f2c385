"""
FastAPI application for the price research system.
Main application entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from research_manager import PriceResearchManager, research_manager
from utils import api_logger, config_manager, get_local_time

from .routes import router
from .middleware import setup_middleware

API_VERSION = "1.0.0"


def create_app(manager: Optional[PriceResearchManager] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        manager: research manager serving the routes; the global instance,
            backed by the configured storage, when omitted
    """
    manager = manager or research_manager

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open storage on startup and close it on shutdown"""
        api_logger.info("[API] Starting Price Research API...")
        await manager.initialize()
        app.state.manager = manager

        yield

        api_logger.info("[API] Shutting down Price Research API...")
        try:
            await manager.close()
        except Exception as e:
            api_logger.error(f"[API] Error during shutdown: {e}")

    app = FastAPI(
        title="Price Research API",
        description="Pesquisa de preços para processos de contratação pública",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.manager = manager

    setup_middleware(app)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "message": "Price Research API",
            "version": API_VERSION,
            "docs": "/docs",
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check"""
        return {
            "status": "healthy",
            "timestamp": get_local_time().isoformat(),
            "version": API_VERSION,
            "storage": manager.storage.backend_name if manager.storage else None
        }

    return app


app = create_app()


def run_server(host: str = None, port: int = None, reload: bool = None):
    """Serve the API with uvicorn using api_config defaults"""
    api_config = config_manager.get_api_config()
    host = host or api_config.host
    port = port or api_config.port
    reload = api_config.reload if reload is None else reload

    api_logger.info(f"[API] Starting server on {host}:{port}")

    if reload:
        uvicorn.run("api.app:app", host=host, port=port, reload=True, log_level="info")
    else:
        uvicorn.run(app, host=host, port=port, workers=api_config.workers, log_level="info")


if __name__ == "__main__":
    run_server()
