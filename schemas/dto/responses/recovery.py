"""
Response DTOs for password-recovery endpoints.

``link`` is only populated when no email channel is configured; route
handlers serialise with ``exclude_none=True`` so absent fields are omitted.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class PasswordResetResponse(BaseModel):
    """Response body for both reset endpoints (200)."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    mode: Optional[Literal["link", "temp"]] = None
    link: Optional[str] = None
