import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import load_app_config

bearer_scheme = HTTPBearer(auto_error=False)


class RequestContext(BaseModel):
    """已校验的调用方身份，按请求注入到各 handler。"""
    user_id: Optional[str] = None
    role: str = "anonymous"

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    def can_modify(self, owner_id: Optional[str]) -> bool:
        return self.is_authenticated and (self.user_id == owner_id or self.role == "admin")


ANONYMOUS = RequestContext()


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: str, role: str) -> str:
    config = load_app_config()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=config.token_expire_minutes)).timestamp()),
    }
    return jwt.encode(payload, config.secret_key, algorithm=config.token_algorithm)


def decode_access_token(token: str) -> RequestContext:
    config = load_app_config()
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.token_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials") from exc
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")
    return RequestContext(user_id=str(user_id), role=str(payload.get("role") or "user"))


def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RequestContext:
    if credentials is None:
        return ANONYMOUS
    return decode_access_token(credentials.credentials)


def require_context(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not context.is_authenticated:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return context


def require_role(*roles: str):
    def _dependency(context: RequestContext = Depends(require_context)) -> RequestContext:
        if not context.has_role(*roles):
            raise HTTPException(status_code=403, detail=f"Forbidden: {' or '.join(roles)} access required")
        return context

    return _dependency


def require_admin_token(x_admin_token: Optional[str] = Header(None, alias="X-Admin-Token")) -> None:
    expected = os.getenv("CATCHLOG_ADMIN_TOKEN", "")
    if not expected:
        return

    provided = x_admin_token or ""
    if not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Invalid admin token")
