"""Resend adapter.

Implements Notifier by posting messages to the Resend HTTP API.

API Documentation: https://resend.com/docs/api-reference/emails/send-email
"""

import logging
import os

import httpx

from domain.model.errors import DeliveryError
from domain.model.notification import EmailMessage

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
API_TIMEOUT_SECONDS = 20.0


class ResendNotifier:
    """Notifier that hands transactional email to the Resend relay."""

    def __init__(
        self,
        api_key: str | None = None,
        sender: str | None = None,
        client: httpx.Client | None = None,
    ):
        self.api_key = (api_key if api_key is not None else os.getenv("RESEND_API_KEY", "")).strip()
        self.sender = (sender if sender is not None else os.getenv("MAIL_FROM", "")).strip()
        self._client = client

    def send(self, message: EmailMessage) -> None:
        if not self.api_key or not self.sender:
            logger.error("Email service not configured", extra={"to": message.to})
            raise DeliveryError("Email service not configured")

        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._client is not None:
                response = self._client.post(RESEND_API_URL, headers=headers, json=payload)
            else:
                with httpx.Client(timeout=API_TIMEOUT_SECONDS) as client:
                    response = client.post(RESEND_API_URL, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Resend rejected email",
                extra={"to": message.to, "status_code": e.response.status_code},
            )
            raise DeliveryError("Failed to send email") from e
        except httpx.RequestError as e:
            logger.error(
                "Resend request error",
                extra={"to": message.to, "error_type": type(e).__name__},
            )
            raise DeliveryError("Email service communication error") from e

        logger.info("Email sent", extra={"to": message.to, "subject": message.subject})
