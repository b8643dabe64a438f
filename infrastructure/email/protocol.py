"""EmailProvider protocol - services depend on this, not the concrete implementation."""

from typing import Protocol


class EmailProvider(Protocol):
    async def send(
        self, to: str, subject: str, text_body: str, html_body: str
    ) -> None:
        """Deliver one message. Raises NotificationError on any failure."""
        ...
