"""Resend email API client.

Sends email with ``POST {api_url}/emails`` and a Bearer API key.
"""

from typing import List, Optional

import requests

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationResult,
    classify_http_error,
    classify_http_response,
)

logger = get_module_logger()


class ResendClient:
    """Resend email gateway.

    Args:
        api_key: Resend API key
        api_url: API base URL
        timeout: Seconds before a call is abandoned
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.resend.com",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("Resend API key is required")
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def send_email(
        self,
        to: str | List[str],
        subject: str,
        html: str,
        text: Optional[str] = None,
        sender: str = "FreshTrack <no-reply@freshtrack.systems>",
    ) -> OperationResult:
        """Send one email.

        Returns:
            OperationResult whose data is ``{"id": <message id>}`` on success
        """
        payload = {
            "from": sender,
            "to": to if isinstance(to, list) else [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        try:
            response = self._session.post(
                f"{self._api_url}/emails",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("resend_request_failed", subject=subject, error=str(e))
            return classify_http_error(e, provider="resend")

        if not response.ok:
            result = classify_http_response(response, provider="resend")
            logger.error(
                "resend_send_failed",
                subject=subject,
                status_code=response.status_code,
                error=result.message,
            )
            return result

        try:
            body = response.json()
        except ValueError:
            body = {}
        logger.info("resend_email_sent", subject=subject, message_id=body.get("id"))
        return OperationResult.success(
            data={"id": body.get("id")}, message="email accepted by resend"
        )
