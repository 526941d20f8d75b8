from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


@router.get("/version")
@limiter.limit("50/minute")
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Deployed git SHA."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit("50/minute")
def get_health(request: Request, settings: SettingsDep):
    """Liveness plus which background components and gateways are active.

    The process is healthy even when a gateway is unconfigured; those
    channels simply fail delivery until it is.
    """
    state = request.app.state
    return {
        "status": "ok",
        "components": {
            "scheduler": getattr(state, "scheduler", None) is not None,
            "telegram_polling": getattr(state, "telegram_poller", None) is not None,
            "telegram_configured": settings.telegram.is_configured,
            "email_configured": settings.email.is_configured,
        },
    }
