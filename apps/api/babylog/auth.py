from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from fastapi import Header, HTTPException

from .babies import ensure_user, get_baby_for_user
from .config import CONFIG
from .schemas import Baby


def _parse_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Unauthorized")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization token.")
    return parts[1]


def _verify_access_token(token: str) -> Dict[str, Any]:
    secret = CONFIG.jwt_secret
    if not secret:
        raise HTTPException(status_code=500, detail="Server is missing BABYLOG_JWT_SECRET.")
    audience = CONFIG.jwt_audience
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=audience if audience else None,
            options={"verify_aud": bool(audience)},
        )
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid or expired token.") from exc


@dataclass
class AuthContext:
    user_id: str
    user_email: Optional[str]


async def get_auth_context(authorization: Optional[str] = Header(None)) -> AuthContext:
    token = _parse_bearer_token(authorization)
    payload = _verify_access_token(token)
    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise HTTPException(status_code=401, detail="Invalid or expired token.")
    user_email = payload.get("email")
    ensure_user(user_id, user_email)
    return AuthContext(user_id=user_id, user_email=user_email)


def require_baby_access(baby_id: str, auth: AuthContext) -> Baby:
    baby = get_baby_for_user(baby_id, auth.user_id)
    if baby is None:
        raise HTTPException(status_code=403, detail="Forbidden")
    return baby
