"""
Password-recovery workflows.

request_password_reset  - self-serve: validate → rate limit → issue link →
                          email it, or return it when no channel exists
admin_reset_password    - admin: validate → authorize → "link" or "temp"

Validation and authorization run before any side effect. Nothing is retried
and nothing is rolled back: in "temp" mode a notification failure leaves the
new password set and sessions revoked, and the NotificationError still
reaches the caller.
"""

from __future__ import annotations

from typing import Optional

from structlog.stdlib import BoundLogger

from config import RecoverySettings
from errors import (
    InvalidArgumentError,
    NotificationError,
    PermissionDeniedError,
    ProviderError,
    UserNotFoundError,
)
from schemas.dto.requests.recovery import (
    RESET_MODE_LINK,
    RESET_MODE_TEMP,
    RESET_MODES,
    AdminPasswordResetRequest,
    PasswordResetRequest,
)
from schemas.dto.responses.recovery import PasswordResetResponse
from schemas.models.caller import CallerIdentity
from services.authorization import AuthorizationGate
from services.credential_issuer import CredentialIssuer
from services.notifier import Notifier
from services.rate_limiter import RateLimiter, self_serve_throttle_key
from shared.logging import get_logger, hash_ip, log_with_context
from shared.validators import (
    MIN_TEMP_PASSWORD_LENGTH,
    normalize_email,
    validate_app_id,
    validate_continue_url,
    validate_email,
    validate_temp_password,
)

log = get_logger(__name__)

_INVALID_TARGET_MESSAGE = "appId and a valid email are required."


class RecoveryService:
    def __init__(
        self,
        settings: RecoverySettings,
        rate_limiter: RateLimiter,
        authorization: AuthorizationGate,
        issuer: CredentialIssuer,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._settings = settings
        self._rate_limiter = rate_limiter
        self._authorization = authorization
        self._issuer = issuer
        # None ⇒ no email channel: links are returned to the caller instead
        self._notifier = notifier

    @property
    def notifications_enabled(self) -> bool:
        return self._notifier is not None

    def _redirect_url(self, continue_url: Optional[str]) -> str:
        return continue_url or self._settings.default_redirect_url

    @staticmethod
    def _validate_target(
        app_id: Optional[str], email: Optional[str], continue_url: Optional[str]
    ) -> tuple[str, str]:
        email = normalize_email(email)
        if not validate_app_id(app_id):
            raise InvalidArgumentError(_INVALID_TARGET_MESSAGE, field="appId")
        if not validate_email(email):
            raise InvalidArgumentError(_INVALID_TARGET_MESSAGE, field="email")
        if not validate_continue_url(continue_url):
            raise InvalidArgumentError(
                "continueUrl must be an absolute http(s) URL.", field="continueUrl"
            )
        return app_id.strip(), email

    # ── Self-serve ──────────────────────────────────────────────────────────

    async def request_password_reset(
        self, request: PasswordResetRequest, client_ip: Optional[str] = None
    ) -> PasswordResetResponse:
        app_id, email = self._validate_target(
            request.app_id, request.email, request.continue_url
        )
        request_log = log_with_context(log, app_id=app_id, ip=hash_ip(client_ip))
        request_log.info("password_reset_requested")

        await self._rate_limiter.check(
            self_serve_throttle_key(email, client_ip),
            self._settings.self_serve_window_seconds,
            self._settings.self_serve_max_attempts,
        )

        try:
            link = await self._issuer.create_reset_link(
                email, self._redirect_url(request.continue_url)
            )
        except UserNotFoundError:
            # Same response as a successful send: existence is never revealed
            request_log.info("password_reset_unknown_account")
            return PasswordResetResponse(ok=True)
        except ProviderError as e:
            request_log.error("password_reset_link_failed", error=e.message)
            raise ProviderError("Unable to process the password reset request.") from e

        if self._notifier is None:
            request_log.info("password_reset_link_returned")
            return PasswordResetResponse(ok=True, link=link)

        await self._notifier.send_reset_link(email, link)
        request_log.info("password_reset_link_sent")
        return PasswordResetResponse(ok=True)

    # ── Admin ───────────────────────────────────────────────────────────────

    async def admin_reset_password(
        self, request: AdminPasswordResetRequest, caller: CallerIdentity
    ) -> PasswordResetResponse:
        app_id, email = self._validate_target(
            request.app_id, request.email, request.continue_url
        )

        mode = request.mode or RESET_MODE_LINK
        if mode not in RESET_MODES:
            raise InvalidArgumentError(
                'mode must be "link" or "temp".', field="mode"
            )
        if mode == RESET_MODE_TEMP and not validate_temp_password(request.temp_password):
            raise InvalidArgumentError(
                f"Provide a tempPassword (>= {MIN_TEMP_PASSWORD_LENGTH} chars).",
                field="tempPassword",
            )

        audit_log = log_with_context(log, app_id=app_id, caller_uid=caller.uid, mode=mode)

        if not await self._authorization.is_admin(caller, app_id):
            audit_log.warning("admin_password_reset_denied")
            raise PermissionDeniedError("Admin privileges required.")

        audit_log.info("admin_password_reset")

        if mode == RESET_MODE_TEMP:
            return await self._reset_with_temp_password(
                email, request.temp_password, audit_log
            )
        return await self._reset_with_link(email, request.continue_url, audit_log)

    async def _reset_with_link(
        self, email: str, continue_url: Optional[str], audit_log: BoundLogger
    ) -> PasswordResetResponse:
        # UserNotFoundError / ProviderError surface as-is on the admin path
        link = await self._issuer.create_reset_link(email, self._redirect_url(continue_url))

        if self._notifier is None:
            return PasswordResetResponse(ok=True, mode=RESET_MODE_LINK, link=link)

        await self._notifier.send_reset_link(email, link)
        audit_log.info("password_reset_link_sent")
        return PasswordResetResponse(ok=True, mode=RESET_MODE_LINK)

    async def _reset_with_temp_password(
        self, email: str, temp_password: str, audit_log: BoundLogger
    ) -> PasswordResetResponse:
        user_id = await self._issuer.get_user_id(email)
        await self._issuer.set_temporary_password(user_id, temp_password)
        audit_log.info("temp_password_set", user_id=user_id)

        if self._notifier is not None:
            try:
                await self._notifier.send_temporary_password(email, temp_password)
            except NotificationError:
                audit_log.error(
                    "temp_password_notification_failed",
                    user_id=user_id,
                    detail="password changed and sessions revoked; user not notified",
                )
                raise

        return PasswordResetResponse(ok=True, mode=RESET_MODE_TEMP)
