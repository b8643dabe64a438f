"""Firebase Authentication implementation of IdentityProvider.

firebase-admin is synchronous, so each call runs in a worker thread via
``asyncio.to_thread`` to keep the event loop free.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError

from config import FirebaseSettings
from infrastructure.identity.protocol import (
    IdentityProviderFailure,
    IdentityTokenInvalid,
    IdentityUser,
    IdentityUserNotFound,
)
from shared.logging import get_logger

log = get_logger(__name__)

_APP_NAME = "password-recovery"

# generate_password_reset_link reports an unknown email as EmailNotFoundError,
# the user lookups as UserNotFoundError; the two are siblings.
_NOT_FOUND_ERRORS = (firebase_auth.UserNotFoundError, firebase_auth.EmailNotFoundError)


def init_firebase_app(settings: FirebaseSettings) -> firebase_admin.App:
    """Return the service's named Firebase app, initialising it once."""
    try:
        return firebase_admin.get_app(_APP_NAME)
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    options: dict[str, Any] = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(cred, options or None, name=_APP_NAME)
    log.info("firebase_initialized", project_id=settings.firebase_project_id or None)
    return app


class FirebaseIdentityProvider:
    def __init__(self, app: Optional[firebase_admin.App] = None) -> None:
        self._app = app

    async def generate_password_reset_link(
        self, email: str, continue_url: str, handle_code_in_app: bool = True
    ) -> str:
        action_code_settings = firebase_auth.ActionCodeSettings(
            url=continue_url,
            handle_code_in_app=handle_code_in_app,
        )
        try:
            return await asyncio.to_thread(
                firebase_auth.generate_password_reset_link,
                email,
                action_code_settings,
                app=self._app,
            )
        except _NOT_FOUND_ERRORS as e:
            raise IdentityUserNotFound(str(e)) from e
        except FirebaseError as e:
            raise IdentityProviderFailure(str(e)) from e

    async def get_user_by_email(self, email: str) -> IdentityUser:
        try:
            record = await asyncio.to_thread(
                firebase_auth.get_user_by_email, email, app=self._app
            )
        except _NOT_FOUND_ERRORS as e:
            raise IdentityUserNotFound(str(e)) from e
        except FirebaseError as e:
            raise IdentityProviderFailure(str(e)) from e
        return IdentityUser(uid=record.uid, email=record.email)

    async def update_password(self, uid: str, password: str) -> None:
        try:
            await asyncio.to_thread(
                firebase_auth.update_user, uid, password=password, app=self._app
            )
        except _NOT_FOUND_ERRORS as e:
            raise IdentityUserNotFound(str(e)) from e
        except FirebaseError as e:
            raise IdentityProviderFailure(str(e)) from e

    async def revoke_refresh_tokens(self, uid: str) -> None:
        try:
            await asyncio.to_thread(
                firebase_auth.revoke_refresh_tokens, uid, app=self._app
            )
        except _NOT_FOUND_ERRORS as e:
            raise IdentityUserNotFound(str(e)) from e
        except FirebaseError as e:
            raise IdentityProviderFailure(str(e)) from e

    async def verify_id_token(self, id_token: str) -> dict[str, Any]:
        # check_revoked rejects tokens minted before a revoke_refresh_tokens call
        try:
            return await asyncio.to_thread(
                firebase_auth.verify_id_token,
                id_token,
                app=self._app,
                check_revoked=True,
            )
        except (
            ValueError,
            firebase_auth.InvalidIdTokenError,
            firebase_auth.RevokedIdTokenError,
            firebase_auth.UserDisabledError,
            firebase_auth.UserNotFoundError,
            firebase_auth.CertificateFetchError,
        ) as e:
            raise IdentityTokenInvalid(str(e)) from e
