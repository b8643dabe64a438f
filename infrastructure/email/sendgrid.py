"""SendGrid implementation of EmailProvider.

Talks to the v3 ``mail/send`` HTTP endpoint through the shared HttpClient
instead of pulling in the SendGrid SDK. Unlike best-effort notifications
elsewhere, every failure here is raised as NotificationError: the caller has
usually already changed a credential and must learn the message did not go
out.
"""

import httpx

from errors import NotificationError
from shared.logging import get_logger
from infrastructure.http_client import HttpClient

log = get_logger(__name__)

_SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailProvider:
    def __init__(self, api_key: str, from_email: str, http_client: HttpClient) -> None:
        self._api_key = api_key
        self._from_email = from_email
        self._http = http_client

    def _payload(self, to: str, subject: str, text_body: str, html_body: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self._from_email},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text_body},
                {"type": "text/html", "value": html_body},
            ],
        }

    async def send(self, to: str, subject: str, text_body: str, html_body: str) -> None:
        if not self._api_key:
            raise NotificationError("Email channel is not configured.")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.post(
                _SENDGRID_API_URL,
                json=self._payload(to, subject, text_body, html_body),
                headers=headers,
            )
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NotificationError("Failed to send email.") from e

        # SendGrid answers 202 Accepted on success
        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", subject=subject)
            return

        log.error(
            "email_send_failed",
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        raise NotificationError(
            "Failed to send email.", details={"status_code": response.status_code}
        )
