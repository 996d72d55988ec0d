import json
import logging
import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("quickfix.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(json.dumps({
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "duration_ms": round(duration_ms, 2),
            }))
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Id"] = request_id

        logger.info(json.dumps({
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "admin": getattr(request.state, "admin_username", None),
        }))
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window request counter per client IP, shared through Redis.

    Fails open: when Redis is unreachable the request is let through.
    """

    def __init__(
        self,
        app,
        redis_client,
        max_requests: int = 100,
        window_seconds: int = 900,
        prefix: str = "",
    ):
        super().__init__(app)
        self.exempt = {"/docs", "/redoc", "/openapi.json", f"{prefix}/health"}
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in self.exempt or path.startswith("/docs/"):
            return await call_next(request)

        ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = f"rl:ip:{ip}:{window}"

        try:
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, self.window_seconds + 10)
        except RedisError as e:
            logger.warning("Rate limiter unavailable, allowing request: %s", e)
            return await call_next(request)

        if count > self.max_requests:
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": "Too many requests from this IP, please try again later.",
                },
            )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, production: bool = False):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response
