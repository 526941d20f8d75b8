"""Telegram Bot API client.

Every call is a POST to ``{api_url}/bot<token>/<method>`` with a JSON body.
The API answers ``{"ok": true, "result": ...}`` or ``{"ok": false,
"description": ...}``; both HTTP failures and ``ok=false`` become error
OperationResults.
"""

from typing import Any, Dict, List, Optional

import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationResult,
    classify_http_error,
    classify_http_response,
)

logger = get_module_logger()

ALLOWED_UPDATES = ["message", "my_chat_member", "callback_query"]


class TelegramClient:
    """Thin wrapper over the Bot API methods the engine uses.

    Args:
        token: Bot token
        api_url: Bot API base URL
        timeout: Seconds before a call is abandoned
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        if not token:
            raise ValueError("Telegram bot token is required")
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._me: Optional[Dict[str, Any]] = None

    def _call(
        self,
        method: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        url = f"{self._api_url}/bot{self._token}/{method}"
        try:
            response = self._session.post(
                url, json=payload or {}, timeout=timeout or self._timeout
            )
        except requests.RequestException as e:
            logger.warning("telegram_api_request_failed", method=method, error=str(e))
            return classify_http_error(e, provider="telegram")

        if not response.ok:
            result = classify_http_response(response, provider="telegram")
            logger.warning(
                "telegram_api_error",
                method=method,
                status_code=response.status_code,
                error=result.message,
            )
            return result

        try:
            body = response.json()
        except ValueError:
            return OperationResult.transient_error(
                f"telegram returned a non-JSON body for {method}",
                error_code="INVALID_RESPONSE",
            )

        if not body.get("ok"):
            description = body.get("description") or f"Telegram API error: {method}"
            logger.warning("telegram_api_not_ok", method=method, error=description)
            return OperationResult.permanent_error(
                description, error_code=str(body.get("error_code", "NOT_OK"))
            )

        return OperationResult.success(
            data=body.get("result"), message=f"telegram.{method} succeeded"
        )

    def send_message(
        self,
        chat_id: int | str,
        text: str,
        parse_mode: str = "Markdown",
        disable_notification: bool = False,
        reply_markup: Optional[Dict[str, Any]] = None,
    ) -> OperationResult:
        """Send a text message.

        Returns:
            OperationResult whose data is the sent Message object
        """
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "disable_notification": disable_notification,
        }
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return self._call("sendMessage", payload)

    def get_me(self) -> OperationResult:
        """Return the bot's own User object, cached after the first success."""
        if self._me is not None:
            return OperationResult.success(data=self._me)
        result = self._call("getMe")
        if result.is_success:
            self._me = result.data
        return result

    def get_updates(self, offset: int = 0, timeout: int = 30) -> OperationResult:
        """Long-poll for updates.

        Returns:
            OperationResult whose data is a list of Update objects
        """
        return self._call(
            "getUpdates",
            {"offset": offset, "timeout": timeout, "allowed_updates": ALLOWED_UPDATES},
            timeout=timeout + self._timeout,
        )

    def healthcheck(self) -> bool:
        result = self.get_me()
        logger.info(
            "telegram_healthcheck",
            status="healthy" if result.is_success else "unhealthy",
        )
        return result.is_success

    @staticmethod
    def message_id(result: OperationResult) -> Optional[str]:
        """Extract message_id from a sendMessage result."""
        message_id = result.get("message_id") if result.is_success else None
        return str(message_id) if message_id is not None else None

    @staticmethod
    def updates(result: OperationResult) -> List[Dict[str, Any]]:
        if result.is_success and isinstance(result.data, list):
            return result.data
        return []
