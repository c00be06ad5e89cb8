import logging

from fastapi import FastAPI

from .api.health import router as health_router
from .core.config import Settings, settings
from .core.logging import configure_logging, cloud_logger
from .middleware import RequestLogMiddleware, make_middleware

configure_logging(settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


def create_app(config: Settings) -> RequestLogMiddleware:
    """Build the FastAPI app and wrap it with request logging."""
    if not config.project_id:
        logger.warning("No project id configured (GOOGLE_CLOUD_PROJECT); trace ids will be incomplete")

    api = FastAPI(title="requestlog", version="0.1.0")
    api.state.settings = config
    api.include_router(health_router)

    # Wraps the built app so error responses are logged as actually sent
    return make_middleware(config.project_id, cloud_logger, trust_proxy=config.trust_proxy)(api)


# ── App ───────────────────────────────────────────────────────

app = create_app(settings)
