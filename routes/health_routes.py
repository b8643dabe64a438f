"""
Health check endpoint.

GET /health - checks MongoDB (and Redis when it backs the throttle store).
Rules:
- MongoDB failure → "unhealthy" (503); role lookups and the default
  throttle store depend on it.
- Redis failure → "unhealthy" when it is the throttle backend.
- No email channel → "degraded" (200); resets still work but links are
  returned to callers.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, response: Response) -> HealthResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        db = request.app.state.db
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    redis = request.app.state.redis
    if redis is None:
        checks["redis"] = "not_configured"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "error"
            overall = "unhealthy"

    if request.app.state.recovery_service.notifications_enabled:
        checks["email"] = "ok"
    else:
        checks["email"] = "not_configured"
        if overall == "healthy":
            overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503
    return HealthResponse(status=overall, checks=checks)
