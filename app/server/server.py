from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from infrastructure.logging import bind_request_context
from infrastructure.services import get_settings
from server.lifespan import lifespan

settings = get_settings()

handler = FastAPI(
    title="FreshTrack Notifications",
    version=settings.GIT_SHA,
    lifespan=lifespan,
)
setup_rate_limiter(handler)

handler.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


@handler.middleware("http")
async def correlate_request(request: Request, call_next):
    """Tag every log line of a request with one id, echoed back to the caller."""
    with bind_request_context(
        correlation_id=request.headers.get("X-Request-ID"),
        request_path=request.url.path,
        request_method=request.method,
    ) as correlation_id:
        response = await call_next(request)
    response.headers["X-Request-ID"] = correlation_id
    return response


handler.include_router(api_router)
