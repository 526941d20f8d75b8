"""Telegram webhook endpoint."""

import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Header, HTTPException, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.services import BotCommandHandlerDep, SettingsDep

logger = get_module_logger()
router = APIRouter(prefix="/telegram", tags=["Telegram"])
limiter = get_limiter()


@router.post("/webhook")
@limiter.limit("120/minute")
def telegram_webhook(
    request: Request,
    settings: SettingsDep,
    handler: BotCommandHandlerDep,
    update: Dict[str, Any] = Body(...),
    secret_token: Optional[str] = Header(
        default=None, alias="X-Telegram-Bot-Api-Secret-Token"
    ),
):
    """Receive one update from the Bot API.

    Telegram retries a webhook that does not answer 200, so handler failures
    are logged and acknowledged.
    """
    expected = settings.telegram.TELEGRAM_WEBHOOK_SECRET
    if expected and not hmac.compare_digest(secret_token or "", expected):
        logger.warning("telegram_webhook_secret_mismatch")
        raise HTTPException(status_code=401, detail="Invalid secret token")

    if handler is None:
        raise HTTPException(status_code=503, detail="Telegram bot is not configured")

    with bind_request_context(
        correlation_id=str(update.get("update_id")),
        request_path=request.url.path,
        request_method=request.method,
    ):
        try:
            action = handler.process_update(update)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "telegram_webhook_update_failed",
                update_id=update.get("update_id"),
                error=str(e),
                exc_info=True,
            )
            action = None

    return {"ok": True, "action": action}
