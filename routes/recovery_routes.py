"""
Password-recovery endpoints.

POST /v1/password-reset/request - self-serve, throttled per (email, IP)
POST /v1/password-reset/admin   - admin-initiated, "link" or "temp" mode

Both return PasswordResetResponse with None fields omitted; failures are
AppErrors rendered by the global handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from dependencies import get_caller, get_recovery_service
from schemas.dto.requests.recovery import AdminPasswordResetRequest, PasswordResetRequest
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.recovery import PasswordResetResponse
from schemas.models.caller import CallerIdentity
from services.recovery_service import RecoveryService
from shared.ip_utils import get_client_ip

router = APIRouter(prefix="/v1/password-reset", tags=["password-reset"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post(
    "/request",
    response_model=PasswordResetResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def request_password_reset(
    body: PasswordResetRequest,
    request: Request,
    service: RecoveryService = Depends(get_recovery_service),
) -> PasswordResetResponse:
    return await service.request_password_reset(body, client_ip=get_client_ip(request))


@router.post(
    "/admin",
    response_model=PasswordResetResponse,
    response_model_exclude_none=True,
    responses={
        **_ERROR_RESPONSES,
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def admin_reset_password(
    body: AdminPasswordResetRequest,
    caller: CallerIdentity = Depends(get_caller),
    service: RecoveryService = Depends(get_recovery_service),
) -> PasswordResetResponse:
    return await service.admin_reset_password(body, caller)
