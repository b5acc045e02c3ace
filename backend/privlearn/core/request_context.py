"""Who is calling and which request this is, as seen by middleware and dependencies."""

from __future__ import annotations

from fastapi import Request

from privlearn.core.config import settings


def request_id(request: Request) -> str | None:
    rid = getattr(getattr(request, "state", None), "request_id", None)
    rid = str(rid or "").strip()
    return rid or None


def request_account(request: Request) -> str | None:
    account = getattr(getattr(request, "state", None), "account", None)
    account = str(account or "").strip()
    return account or None


def client_ip(request: Request) -> str | None:
    if bool(getattr(settings, "trust_proxy_headers", False)):
        xff = str(request.headers.get("x-forwarded-for") or "")
        ip = xff.split(",")[0].strip()
        if ip:
            return ip
    if request.client and request.client.host:
        return request.client.host
    return None


def rate_subject(request: Request) -> str:
    """Authenticated account when known, client address otherwise."""
    account = request_account(request)
    if account:
        return f"acct:{account}"
    return f"ip:{client_ip(request) or 'unknown'}"
