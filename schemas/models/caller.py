"""
Authenticated caller identity.

Built per request from a verified ID token (see dependencies.get_caller);
never persisted. ``claims`` holds the token's trusted custom claims.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CallerIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: Optional[str] = None
    claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uid)

    @property
    def has_admin_claim(self) -> bool:
        return self.claims.get("admin") is True

    @classmethod
    def anonymous(cls) -> "CallerIdentity":
        return cls()
