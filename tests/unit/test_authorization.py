"""Unit tests for AuthorizationGate and RoleRepository."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from repositories.role_repository import COLLECTION, RoleRepository
from schemas.models.caller import CallerIdentity
from schemas.models.role import RoleRecordDoc
from services.authorization import AuthorizationGate


class TestAuthorizationGate:
    async def test_anonymous_caller_denied_without_lookup(self, role_store):
        gate = AuthorizationGate(role_store)
        assert await gate.is_admin(CallerIdentity.anonymous(), "a1") is False
        assert role_store.lookups == []

    async def test_admin_claim_short_circuits_lookup(self, role_store, admin_caller):
        # Even a record saying otherwise is never consulted
        role_store.records = [RoleRecordDoc(app_id="a1", user_id="admin-uid", role="viewer")]
        gate = AuthorizationGate(role_store)
        assert await gate.is_admin(admin_caller, "a1") is True
        assert role_store.lookups == []

    async def test_admin_claim_wins_even_if_lookup_would_fail(self, role_store, admin_caller):
        role_store.error = ConnectionError("down")
        assert await AuthorizationGate(role_store).is_admin(admin_caller, "a1") is True

    @pytest.mark.parametrize("claim_value", [False, "true", 1, None])
    async def test_only_literal_true_claim_counts(self, role_store, claim_value):
        caller = CallerIdentity(uid="u", claims={"admin": claim_value})
        assert await AuthorizationGate(role_store).is_admin(caller, "a1") is False
        assert role_store.lookups == [("a1", "u")]

    async def test_role_record_admin_grants(self, role_store, plain_caller):
        role_store.records = [RoleRecordDoc(app_id="a1", user_id="user-uid", role="admin")]
        assert await AuthorizationGate(role_store).is_admin(plain_caller, "a1") is True

    async def test_role_record_other_role_denied(self, role_store, plain_caller):
        role_store.records = [RoleRecordDoc(app_id="a1", user_id="user-uid", role="editor")]
        assert await AuthorizationGate(role_store).is_admin(plain_caller, "a1") is False

    async def test_missing_record_denied(self, role_store, plain_caller):
        assert await AuthorizationGate(role_store).is_admin(plain_caller, "a1") is False

    async def test_admin_in_other_tenant_does_not_leak(self, role_store, plain_caller):
        role_store.records = [RoleRecordDoc(app_id="other", user_id="user-uid", role="admin")]
        assert await AuthorizationGate(role_store).is_admin(plain_caller, "a1") is False
        assert role_store.lookups == [("a1", "user-uid")]

    async def test_lookup_failure_propagates(self, role_store, plain_caller):
        role_store.error = ConnectionError("mongo down")
        with pytest.raises(ConnectionError):
            await AuthorizationGate(role_store).is_admin(plain_caller, "a1")


class TestRoleRepository:
    def _make(self, found):
        col = MagicMock()
        col.find_one = AsyncMock(return_value=found)
        db = MagicMock()
        db.__getitem__.return_value = col
        return RoleRepository(db), db, col

    async def test_filters_on_tenant_and_user(self):
        repo, db, col = self._make(None)
        assert await repo.find_role("a1", "u1") is None
        db.__getitem__.assert_called_with(COLLECTION)
        args, _ = col.find_one.call_args
        assert args[0] == {"app_id": "a1", "user_id": "u1"}

    async def test_returns_record(self):
        repo, _, _ = self._make({"app_id": "a1", "user_id": "u1", "role": "admin", "extra": 1})
        record = await repo.find_role("a1", "u1")
        assert record is not None
        assert record.is_admin is True
