"""
Reset notifications over an EmailProvider.

RecoveryService only builds a Notifier when an email channel is configured;
without one the notification step is skipped entirely. Provider failures
surface as NotificationError.
"""

from __future__ import annotations

from html import escape

from infrastructure.email.protocol import EmailProvider


RESET_LINK_SUBJECT = "Reset your password"
TEMP_PASSWORD_SUBJECT = "Temporary password issued"


class Notifier:
    def __init__(self, provider: EmailProvider) -> None:
        self._provider = provider

    async def send(self, to: str, subject: str, text_body: str, html_body: str) -> None:
        await self._provider.send(to, subject, text_body, html_body)

    async def send_reset_link(self, to: str, link: str) -> None:
        text_body = f"Click the link to reset your password: {link}"
        safe_link = escape(link, quote=True)
        html_body = (
            "<p>Click the link to reset your password:</p>"
            f'<p><a href="{safe_link}">{safe_link}</a></p>'
        )
        await self.send(to, RESET_LINK_SUBJECT, text_body, html_body)

    async def send_temporary_password(self, to: str, temp_password: str) -> None:
        text_body = (
            "A temporary password was set by an administrator.\n"
            f"Temporary password: {temp_password}\n"
            "Please sign in and change it immediately."
        )
        html_body = (
            "<p>A temporary password was set by an administrator.</p>"
            f"<p><b>Temporary password:</b> {escape(temp_password)}</p>"
            "<p>Please sign in and change it immediately.</p>"
        )
        await self.send(to, TEMP_PASSWORD_SUBJECT, text_body, html_body)
