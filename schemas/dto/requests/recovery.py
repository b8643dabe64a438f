"""
Request DTOs for password-recovery endpoints.

PasswordResetRequest       - POST /v1/password-reset/request
AdminPasswordResetRequest  - POST /v1/password-reset/admin

Fields are deliberately lenient (all optional strings): RecoveryService owns
validation so malformed input surfaces as ``invalid_argument`` rather than a
framework-shaped 422.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

RESET_MODE_LINK = "link"
RESET_MODE_TEMP = "temp"
RESET_MODES = frozenset({RESET_MODE_LINK, RESET_MODE_TEMP})


class PasswordResetRequest(BaseModel):
    """Self-serve reset request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    app_id: Optional[str] = Field(default=None, alias="appId")
    email: Optional[str] = None
    continue_url: Optional[str] = Field(default=None, alias="continueUrl")


class AdminPasswordResetRequest(BaseModel):
    """Admin-initiated reset request.

    ``mode`` defaults to ``"link"``; ``temp_password`` is only read in
    ``"temp"`` mode.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    app_id: Optional[str] = Field(default=None, alias="appId")
    email: Optional[str] = None
    mode: str = RESET_MODE_LINK
    temp_password: Optional[str] = Field(default=None, alias="tempPassword")
    continue_url: Optional[str] = Field(default=None, alias="continueUrl")
