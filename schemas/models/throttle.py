"""
Throttle record document model.

Maps to the `rate-limits` MongoDB collection.

_id is the encoded throttle key; hits holds attempt timestamps in epoch
milliseconds, oldest first. Only timestamps inside the active window are
kept after each admitted attempt, so a record never holds more than
max_count entries. Records are never deleted; stale ones are simply
overwritten on the next attempt for the same key.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel

THROTTLE_SCOPE_PASSWORD_RESETS = "password_resets"


class ThrottleRecordDoc(MongoBaseModel):
    """Document model for the `rate-limits` collection."""

    key: str = Field(alias="_id")
    scope: str = THROTTLE_SCOPE_PASSWORD_RESETS
    hits: list[int] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
