import logging
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.api.error import ClientError, client_error_handler
from src.api.middleware import RequestLoggingMiddleware
from src.api.routes import billing, metered, webhooks

logger = logging.getLogger(__name__)


def _init_sentry(config) -> None:
    sentry_sdk.init(
        dsn=config.DSN_SENTRY,
        environment=config.SENTRY_ENVIRONMENT,
        traces_sample_rate=0.0,
    )
    logger.info(f"Sentry enabled for environment {config.SENTRY_ENVIRONMENT}")


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        _init_sentry(config)

    app = FastAPI(title="Outreach Event & Credit Ledger API")
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ClientError, client_error_handler)

    @app.get("/health")
    async def health():
        return {"ok": True}

    app.include_router(billing.router, prefix=config.API_PREFIX)
    app.include_router(metered.router, prefix=config.API_PREFIX)
    app.include_router(webhooks.router, prefix=config.API_PREFIX)

    return app
