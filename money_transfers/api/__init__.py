"""
Money Transfers API Application Factory
"""

from typing import Optional
from fastapi import FastAPI
import uvicorn

from .accounts import router as accounts_router
from .transfers import router as transfers_router
from .system import TransferSystem, get_transfer_system
from ..config import get_config
from ..logging_config import setup_logging
from .. import __version__


def create_app(system: Optional[TransferSystem] = None) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        system: Services to serve; the lazily created global system is used when omitted
    """
    config = get_config()
    setup_logging(config.log_level, config.log_format)

    app = FastAPI(
        title="Money Transfers API",
        description="Accounts and atomic money transfers between them",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    if system is not None:
        app.dependency_overrides[get_transfer_system] = lambda: system

    app.include_router(accounts_router, prefix="/api/accounts", tags=["Accounts"])
    app.include_router(transfers_router, prefix="/api/transfers", tags=["Transfers"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "money_transfers_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Money Transfers API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "accounts": "/api/accounts",
                "transfers": "/api/transfers",
            }
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the API with uvicorn"""
    config = get_config()
    uvicorn.run(
        create_app(),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower()
    )
