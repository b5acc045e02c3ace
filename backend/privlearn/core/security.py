from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from privlearn.core.config import admin_account_set, settings


bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(*, account: str, minutes: int | None = None) -> str:
    now = datetime.utcnow()
    expire = now + timedelta(minutes=int(minutes or settings.jwt_access_token_minutes))
    payload = {
        "sub": str(account),
        "iat": now,
        "exp": expire,
        "iss": str(getattr(settings, "jwt_issuer", "privlearn")),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def is_administrator(account: str) -> bool:
    return str(account or "").strip() in admin_account_set()


def get_current_account(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get("privlearn_token")
    if not token:
        raise HTTPException(status_code=401, detail="not authenticated")

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=str(getattr(settings, "jwt_issuer", "privlearn")),
        )
    except JWTError as e:
        raise HTTPException(status_code=401, detail="invalid token") from e

    account = str(payload.get("sub") or "").strip()
    if not account:
        raise HTTPException(status_code=401, detail="invalid token")

    request.state.account = account
    return account
