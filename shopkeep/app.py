"""
shopkeep - product catalogue API with API-key and token based access control
Application factory
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopkeep.api.router import router as api_router
from shopkeep.core.config import Settings
from shopkeep.core.handlers import register_exception_handlers
from shopkeep.core.logger import get_logger
from shopkeep.core.middleware import RequestLoggingMiddleware
from shopkeep.core.rate_limit import get_trusted_proxies, limiter
from shopkeep.core.services import Services

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application and its services.

    Secrets are generated here, so every app instance has its own API key
    and signing secret.
    """
    if settings is None:
        settings = Settings.from_env()

    app = FastAPI(title="shopkeep API", debug=settings.debug)

    app.state.services = Services.build(settings)
    app.state.limiter = limiter
    # Parse SHOPKEEP_TRUSTED_PROXIES now so a bad value fails at startup
    get_trusted_proxies()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)

    logger.info("shopkeep application initialized")
    return app
