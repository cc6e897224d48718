"""Resend email API client adapter."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from storefront.models.errors import EmailDeliveryError
from storefront.models.notifications import EmailMessage
from storefront.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


class EmailClient(Protocol):
    """Interface for transactional email delivery."""

    def send(self, message: EmailMessage) -> str | None:
        """Send a message; returns the provider message ID when available."""


def is_retryable_email_exception(exc: Exception) -> bool:
    """Timeouts, transport failures, 429 and 5xx are retried; other 4xx are not."""
    if isinstance(exc, EmailDeliveryError):
        return exc.retryable
    return isinstance(exc, httpx.TransportError)


@dataclass
class ResendEmailClient:
    """Email client for the Resend HTTP API implemented with httpx."""

    api_key: str
    http_client: httpx.Client
    api_url: str = "https://api.resend.com/emails"
    timeout: float = 10.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @classmethod
    def create(cls, api_key: str, *, api_url: str, timeout: float, retry: RetryPolicy) -> "ResendEmailClient":
        """Create a client with a managed httpx session."""
        return cls(
            api_key=api_key,
            http_client=httpx.Client(timeout=timeout),
            api_url=api_url,
            timeout=timeout,
            retry=retry,
        )

    def _post(self, message: EmailMessage) -> str | None:
        try:
            response = self.http_client.post(
                self.api_url,
                json=message.to_payload(),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except httpx.TransportError as e:
            raise EmailDeliveryError(f"Email API request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Resend send failed (status %d): %s",
                response.status_code,
                response.text[:500],
            )
            raise EmailDeliveryError(
                f"Email API returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("id") if isinstance(body, dict) else None

    def send(self, message: EmailMessage) -> str | None:
        """Send one email, retrying transient failures.

        Raises:
            EmailDeliveryError: If the API rejects the message or all attempts fail.
        """
        message_id = self.retry.call(
            lambda: self._post(message),
            is_retryable=is_retryable_email_exception,
            operation="send_email",
        )
        logger.info("Email sent: subject=%r recipients=%d id=%s", message.subject, len(message.to), message_id)
        return message_id

    def close(self) -> None:
        """Close the underlying HTTP client session."""
        self.http_client.close()
