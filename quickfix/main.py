import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin_routes import router as admin_router
from .config import Settings
from .db import get_engine, get_session, init_models
from .errors import AuthenticationError, PersistenceError, QuickFixError, ValidationError
from .middleware import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from .notifications import BookingNotifications, build_notifications
from .rabbitmq import RabbitPublisher
from .redis_client import get_redis_client
from .routes import router as booking_router
from .security import TokenService
from .setup_routes import router as setup_router
from .validation import field_errors

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "System", "description": "Operational endpoints (health)."},
    {"name": "Bookings", "description": "Public booking submission and tracking."},
    {"name": "Admin", "description": "Admin login and booking management (bearer token)."},
    {"name": "Setup", "description": "Bootstrap admin provisioning."},
]


def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_body(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def register_exception_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(QuickFixError)
    async def quickfix_error_handler(request: Request, exc: QuickFixError):
        extra = {}
        if isinstance(exc, ValidationError):
            extra["errors"] = [e.as_dict() for e in exc.errors]
        if isinstance(exc, AuthenticationError):
            extra["hint"] = exc.hint
        if isinstance(exc, PersistenceError):
            logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc.__cause__)
            if settings.is_development and exc.__cause__ is not None:
                extra["detail"] = str(exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, **extra))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [e.as_dict() for e in field_errors(exc.errors())]
        return JSONResponse(status_code=400, content=_error_body("Validation failed", errors=errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(message), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        detail = str(exc) if settings.is_development else "Internal server error"
        return JSONResponse(status_code=500, content=_error_body("Something went wrong", detail=detail))


def create_app(
    settings: Settings | None = None,
    notifications: BookingNotifications | None = None,
    redis_client=None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    engine = get_engine(settings)
    publisher = RabbitPublisher(settings.RABBIT_URL)
    if notifications is None:
        notifications = build_notifications(settings, publisher)
    if redis_client is None:
        redis_client = get_redis_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_TABLES:
            await init_models(engine)

        # never crash the service if RabbitMQ is temporarily unavailable
        try:
            await publisher.connect()
        except Exception as e:
            logger.warning("RabbitMQ connect failed at startup; continuing without events: %s", e)

        yield

        await publisher.close()
        if redis_client is not None:
            await redis_client.aclose()
        await engine.dispose()

    app = FastAPI(title="QuickFix Booking Service", openapi_tags=OPENAPI_TAGS, lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = get_session(engine)
    app.state.tokens = TokenService(settings)
    app.state.notifications = notifications
    app.state.publisher = publisher

    prefix = settings.API_PREFIX.rstrip("/")

    # last added runs first
    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if redis_client is not None:
        app.add_middleware(
            RateLimitMiddleware,
            redis_client=redis_client,
            max_requests=settings.RATE_LIMIT_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            prefix=prefix,
        )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app, settings)

    @app.get(f"{prefix}/health", tags=["System"])
    async def health():
        return {
            "success": True,
            "status": "ok",
            "service": "quickfix-booking",
            "events_enabled": publisher.enabled,
        }

    app.include_router(booking_router, prefix=prefix)
    app.include_router(admin_router, prefix=prefix)
    app.include_router(setup_router, prefix=prefix)
    return app


def run():
    import uvicorn

    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
