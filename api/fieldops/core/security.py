from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends, Header, HTTPException, status

from fieldops.core.auth import Principal, UserRole, check_role, check_roles
from fieldops.core.config import Settings, get_settings


async def get_principal(
    settings: Settings = Depends(get_settings),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Principal:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="authentication requires bearer token",
        )

    token = authorization.split(" ", maxsplit=1)[1].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="empty bearer token")

    if not settings.jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="token verification is not configured",
        )

    claims = _decode_token(token, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return _principal_from_claims(claims)


def require_role(role: UserRole | str) -> Callable[..., Any]:
    async def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        check_role(principal, role)
        return principal

    return dependency


def require_roles(roles: Iterable[UserRole | str]) -> Callable[..., Any]:
    allowed = frozenset(roles)

    async def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        check_roles(principal, allowed)
        return principal

    return dependency


def encode_access_token(
    *,
    secret: str,
    user_id: str,
    company_id: str,
    role: UserRole | str,
    email: str | None = None,
    algorithm: str = "HS256",
    expires_in: timedelta | None = timedelta(hours=12),
) -> str:
    role_value = role.value if isinstance(role, UserRole) else role
    payload: dict[str, Any] = {
        "userId": user_id,
        "companyId": company_id,
        "role": role_value,
        "iat": datetime.now(timezone.utc),
    }
    if email:
        payload["email"] = email
    if expires_in is not None:
        payload["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(payload, secret, algorithm=algorithm)


def _decode_token(token: str, *, secret: str, algorithm: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="bearer token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid bearer token") from exc


def _principal_from_claims(claims: dict[str, Any]) -> Principal:
    user_id = claims.get("userId") or claims.get("sub")
    company_id = claims.get("companyId")
    role = claims.get("role")
    if not all(isinstance(value, str) and value for value in (user_id, company_id, role)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid bearer token claims")

    email = claims.get("email")
    return Principal(
        user_id=user_id,
        company_id=company_id,
        role=role,
        email=email if isinstance(email, str) and email else None,
    )
