import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .core import errors
from .routers import health, purchases, api_keys
from .services.currency import (
    CurrencyService,
    ExchangeRateNotFound,
    InvalidDescriptor,
    get_currency_service,
)

DESCRIPTION = (
    "Stores purchase transactions in USD and converts them to other currencies "
    "using the U.S. Treasury Reporting Rates of Exchange. Purchase endpoints "
    "require an API key (X-API-Key header or apiKey query parameter)."
)


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    if settings_override is not None:
        settings = settings_override
        settings.init_post_load()
        currency_service = CurrencyService.from_settings(settings)
    else:
        settings = get_settings()
        currency_service = get_currency_service()
    # Initialize logging early
    init_logging(debug=settings.debug, level=settings.log_level)

    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logging.getLogger("purchase_app").exception("failed to apply migrations on startup")
        raise

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        description=DESCRIPTION,
    )
    app.state.settings = settings
    # Catalog loads lazily on first use, never at startup
    app.state.currency_service = currency_service

    # Middleware (request id / structured logging, CORS outermost)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(ExchangeRateNotFound, errors.exchange_rate_not_found_handler)
    app.add_exception_handler(InvalidDescriptor, errors.invalid_descriptor_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(purchases.router)
    app.include_router(api_keys.router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.version}

    return app


app = create_app()
