from __future__ import annotations

from flask import Request


def get_client_ip(request: Request) -> str | None:
    """Best guess at the caller's address, for connection logs."""
    for header in ("CF-Connecting-IP", "X-Real-IP"):
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()

    xff = request.headers.get("X-Forwarded-For", "")
    hops = [p.strip() for p in xff.split(",") if p.strip()]
    if hops:
        return hops[0]

    return request.remote_addr or None
