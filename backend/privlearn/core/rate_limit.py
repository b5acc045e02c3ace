from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from privlearn.core.redis_client import get_redis
from privlearn.core.request_context import rate_subject
from privlearn.core.security import get_current_account

logger = logging.getLogger("privlearn.rate_limit")


@dataclass(frozen=True)
class RateLimit:
    key: str
    subject: str
    count: int
    limit: int
    window_seconds: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


def _hit(*, action: str, subject: str, limit: int, window_seconds: int) -> RateLimit:
    key = f"rl:{action}:{subject}"
    r = get_redis()
    try:
        count = int(r.incr(key))
        if count == 1:
            r.expire(key, int(window_seconds))
    except Exception:
        # Fail open when redis is unreachable.
        logger.warning("rate limiter unavailable action=%s subject=%s", action, subject)
        return RateLimit(key=key, subject=subject, count=0, limit=int(limit), window_seconds=int(window_seconds))

    if count > int(limit):
        ttl = r.ttl(key)
        retry_after = int(ttl) if ttl and ttl > 0 else int(window_seconds)
        logger.info("rate limit hit action=%s subject=%s count=%s", action, subject, count)
        raise HTTPException(
            status_code=429,
            detail={"error_code": "rate_limited", "error_message": f"too many {action} requests"},
            headers={"Retry-After": str(retry_after)},
        )
    return RateLimit(key=key, subject=subject, count=count, limit=int(limit), window_seconds=int(window_seconds))


def account_rate_limit(*, action: str, limit: int, window_seconds: int = 60):
    """Per-account budget for ledger writes; the account is resolved before counting."""

    def _dep(request: Request, _account: str = Depends(get_current_account)) -> RateLimit:
        return _hit(action=action, subject=rate_subject(request), limit=limit, window_seconds=window_seconds)

    return Depends(_dep)


def rate_limit(*, action: str, limit: int, window_seconds: int = 60):
    """Budget keyed on whoever is calling: the account if authenticated, else the client address."""

    def _dep(request: Request) -> RateLimit:
        return _hit(action=action, subject=rate_subject(request), limit=limit, window_seconds=window_seconds)

    return Depends(_dep)
