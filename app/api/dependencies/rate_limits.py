from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from infrastructure.logging import get_module_logger

logger = get_module_logger()


def client_key(request: Request) -> str:
    """Rate limit key: the originating client behind the load balancer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request)


limiter = Limiter(key_func=client_key)


async def rate_limit_handler(request: Request, exc: Exception):
    if not isinstance(exc, RateLimitExceeded):
        raise exc
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        client=client_key(request),
        limit=str(exc.detail),
    )
    return JSONResponse(status_code=429, content={"message": "Rate limit exceeded"})


def setup_rate_limiter(app: FastAPI):
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter() -> Limiter:
    return limiter
