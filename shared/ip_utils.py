"""
Client IP resolution for FastAPI requests.

Takes an explicit ``Request`` so the function is testable without an app.
"""

from __future__ import annotations

from fastapi import Request

# Checked in priority order before the direct connection address
_PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(request: Request, default: str = "noip") -> str:
    """Extract the real client IP from a FastAPI ``Request``.

    Proxy headers win over ``request.client``; for ``X-Forwarded-For`` the
    first (client-most) address is used.

    Returns:
        The resolved client IP string, or *default* when none can be found.
        The default keeps throttle keys well-formed for callers without an
        address (e.g. in-process test clients).
    """
    for header in _PROXY_HEADERS:
        ip_value: str | None = request.headers.get(header)
        if ip_value:
            client_ip = ip_value.split(",")[0].strip()
            if client_ip:
                return client_ip

    if request.client and request.client.host:
        return request.client.host
    return default
