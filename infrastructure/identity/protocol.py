"""IdentityProvider protocol - services depend on this, not the concrete implementation.

Adapters translate their SDK's errors into the three exceptions below so the
service layer never imports a vendor SDK.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol


class IdentityUserNotFound(Exception):
    """No account matches the given email / uid."""


class IdentityProviderFailure(Exception):
    """Any other provider-side failure; the message is the provider's."""


class IdentityTokenInvalid(Exception):
    """A caller's ID token is malformed, expired, revoked or unverifiable."""


@dataclass(frozen=True)
class IdentityUser:
    uid: str
    email: Optional[str] = None


class IdentityProvider(Protocol):
    async def generate_password_reset_link(
        self, email: str, continue_url: str, handle_code_in_app: bool = True
    ) -> str: ...

    async def get_user_by_email(self, email: str) -> IdentityUser: ...

    async def update_password(self, uid: str, password: str) -> None: ...

    async def revoke_refresh_tokens(self, uid: str) -> None: ...

    async def verify_id_token(self, id_token: str) -> dict[str, Any]: ...
