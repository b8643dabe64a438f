"""
Credential issuance on top of the identity provider.

Normalises adapter exceptions into AppErrors:
- IdentityUserNotFound     → UserNotFoundError
- IdentityProviderFailure  → ProviderError (provider message passed through)

A temporary password is always followed by refresh-token revocation in the
same call, so sessions opened with the old password stop working.
"""

from __future__ import annotations

from errors import InvalidArgumentError, ProviderError, UserNotFoundError
from infrastructure.identity.protocol import (
    IdentityProvider,
    IdentityProviderFailure,
    IdentityUserNotFound,
)
from shared.logging import get_logger
from shared.validators import MIN_TEMP_PASSWORD_LENGTH, validate_temp_password

log = get_logger(__name__)


class CredentialIssuer:
    def __init__(self, identity: IdentityProvider) -> None:
        self._identity = identity

    async def create_reset_link(self, email: str, redirect_url: str) -> str:
        try:
            return await self._identity.generate_password_reset_link(
                email, redirect_url, handle_code_in_app=True
            )
        except IdentityUserNotFound as e:
            raise UserNotFoundError("No user found for the given email.") from e
        except IdentityProviderFailure as e:
            raise ProviderError(str(e)) from e

    async def get_user_id(self, email: str) -> str:
        try:
            user = await self._identity.get_user_by_email(email)
        except IdentityUserNotFound as e:
            raise UserNotFoundError("No user found for the given email.") from e
        except IdentityProviderFailure as e:
            raise ProviderError(str(e)) from e
        return user.uid

    async def set_temporary_password(self, user_id: str, new_password: str) -> None:
        """Set *new_password* and then revoke every existing session.

        If revocation fails the password change has still happened and the
        ProviderError is raised to the caller.
        """
        if not validate_temp_password(new_password):
            raise InvalidArgumentError(
                f"Provide a tempPassword (>= {MIN_TEMP_PASSWORD_LENGTH} chars).",
                field="tempPassword",
            )

        try:
            await self._identity.update_password(user_id, new_password)
        except IdentityUserNotFound as e:
            raise UserNotFoundError("No user found for the given id.") from e
        except IdentityProviderFailure as e:
            raise ProviderError(str(e)) from e

        await self._revoke_sessions(user_id)

    async def _revoke_sessions(self, user_id: str) -> None:
        try:
            await self._identity.revoke_refresh_tokens(user_id)
        except (IdentityUserNotFound, IdentityProviderFailure) as e:
            log.error(
                "session_revocation_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ProviderError(f"Password was changed but sessions were not revoked: {e}") from e
        log.info("sessions_revoked", user_id=user_id)
