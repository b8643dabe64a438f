"""
Unit test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during unit tests. Tests control config exclusively through monkeypatch.setenv()
or explicit constructor arguments.

Also provides in-memory fakes for the identity provider, email channel and
role store; every call is appended to a shared ``calls`` list so tests can
assert on ordering across collaborators.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest

from config import RecoverySettings
from errors import NotificationError
from infrastructure.identity.protocol import (
    IdentityProviderFailure,
    IdentityTokenInvalid,
    IdentityUser,
    IdentityUserNotFound,
)
from repositories.memory_throttle import InMemoryThrottleStore
from schemas.models.caller import CallerIdentity
from schemas.models.role import RoleRecordDoc
from services.authorization import AuthorizationGate
from services.credential_issuer import CredentialIssuer
from services.notifier import Notifier
from services.rate_limiter import RateLimiter
from services.recovery_service import RecoveryService


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all unit tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


# ── Fakes ─────────────────────────────────────────────────────────────────────


class FakeIdentityProvider:
    def __init__(self, users: Optional[dict[str, str]] = None, calls=None) -> None:
        # email → uid
        self.users = dict(users or {})
        self.calls: list[tuple] = calls if calls is not None else []
        self.failure: Optional[str] = None
        self.revoke_failure: Optional[str] = None
        self.tokens: dict[str, dict[str, Any]] = {}

    def _maybe_fail(self) -> None:
        if self.failure:
            raise IdentityProviderFailure(self.failure)

    async def generate_password_reset_link(
        self, email: str, continue_url: str, handle_code_in_app: bool = True
    ) -> str:
        self.calls.append(("generate_link", email, continue_url, handle_code_in_app))
        self._maybe_fail()
        if email not in self.users:
            raise IdentityUserNotFound(email)
        return f"https://auth.example.com/reset?oob=code-for-{self.users[email]}"

    async def get_user_by_email(self, email: str) -> IdentityUser:
        self.calls.append(("get_user", email))
        self._maybe_fail()
        if email not in self.users:
            raise IdentityUserNotFound(email)
        return IdentityUser(uid=self.users[email], email=email)

    async def update_password(self, uid: str, password: str) -> None:
        self.calls.append(("update_password", uid, password))
        self._maybe_fail()

    async def revoke_refresh_tokens(self, uid: str) -> None:
        self.calls.append(("revoke", uid))
        if self.revoke_failure:
            raise IdentityProviderFailure(self.revoke_failure)

    async def verify_id_token(self, id_token: str) -> dict[str, Any]:
        self.calls.append(("verify_token", id_token))
        if id_token not in self.tokens:
            raise IdentityTokenInvalid("bad token")
        return self.tokens[id_token]


class FakeEmailProvider:
    def __init__(self, calls=None) -> None:
        self.sent: list[dict] = []
        self.calls: list[tuple] = calls if calls is not None else []
        self.fail = False

    async def send(self, to: str, subject: str, text_body: str, html_body: str) -> None:
        self.calls.append(("send_email", to, subject))
        if self.fail:
            raise NotificationError("Failed to send email.")
        self.sent.append(
            {"to": to, "subject": subject, "text": text_body, "html": html_body}
        )


class FakeRoleStore:
    def __init__(self, records: Optional[list[RoleRecordDoc]] = None) -> None:
        self.records = list(records or [])
        self.lookups: list[tuple[str, str]] = []
        self.error: Optional[Exception] = None

    async def find_role(self, app_id: str, user_id: str) -> Optional[RoleRecordDoc]:
        self.lookups.append((app_id, user_id))
        if self.error is not None:
            raise self.error
        for record in self.records:
            if record.app_id == app_id and record.user_id == user_id:
                return record
        return None


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def identity(calls) -> FakeIdentityProvider:
    return FakeIdentityProvider(users={"u@x.com": "uid-1"}, calls=calls)


@pytest.fixture
def email_provider(calls) -> FakeEmailProvider:
    return FakeEmailProvider(calls=calls)


@pytest.fixture
def role_store() -> FakeRoleStore:
    return FakeRoleStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttle_store() -> InMemoryThrottleStore:
    return InMemoryThrottleStore()


@pytest.fixture
def recovery_settings() -> RecoverySettings:
    return RecoverySettings(
        from_email="noreply@example.com",
        email_api_key="",
        default_redirect_url="https://app.example.com/login",
    )


@pytest.fixture
def make_service(identity, email_provider, role_store, clock, throttle_store, recovery_settings):
    """Build a RecoveryService; ``with_email=True`` wires the fake channel."""

    def _make(with_email: bool = False) -> RecoveryService:
        return RecoveryService(
            settings=recovery_settings,
            rate_limiter=RateLimiter(throttle_store, clock=clock),
            authorization=AuthorizationGate(role_store),
            issuer=CredentialIssuer(identity),
            notifier=Notifier(email_provider) if with_email else None,
        )

    return _make


@pytest.fixture
def admin_caller() -> CallerIdentity:
    return CallerIdentity(uid="admin-uid", claims={"uid": "admin-uid", "admin": True})


@pytest.fixture
def plain_caller() -> CallerIdentity:
    return CallerIdentity(uid="user-uid", claims={"uid": "user-uid"})
