"""
Session tokens, password hashing and the route guards.

The guard logic lives in three plain functions (authenticate, authorize_self,
authorize_admin) that take a token or a principal and either return or raise.
The FastAPI dependencies at the bottom only pull the cookie and the ``id``
path parameter out of the request and hand them over.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from fastapi import Depends, Request, Response
from fastapi.security import APIKeyCookie
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from config import settings
from errors import ForbiddenError, UnauthorizedError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
cookie_scheme = APIKeyCookie(name=settings.cookie_name, auto_error=False)

ADMIN_ROLE = "admin"


class Principal(BaseModel):
    id: int
    name: str
    email: str
    role: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a hash passlib recognises
        return False


def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or token_lifetime())
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def token_for_user(user: Dict[str, Any]) -> str:
    """Sign a session token carrying the principal claims of a users row."""
    return create_access_token(
        {
            "sub": str(user["id"]),
            "name": f"{user['first_name']} {user['last_name']}",
            "email": user["email"],
            "role": user["role"],
        }
    )


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return Principal(
            id=payload.get("sub"),
            name=payload.get("name"),
            email=payload.get("email"),
            role=payload.get("role"),
        )
    except (JWTError, ValidationError):
        raise UnauthorizedError("Invalid or expired token")


# Guards

def authenticate(token: Optional[str]) -> Principal:
    if not token:
        raise UnauthorizedError("Authentication required")
    return decode_access_token(token)


def authorize_self(principal: Principal, resource_user_id: Union[int, str, None]) -> Principal:
    if resource_user_id is None or str(principal.id) != str(resource_user_id):
        raise ForbiddenError("You can only access your own resources")
    return principal


def authorize_admin(principal: Principal) -> Principal:
    if principal.role != ADMIN_ROLE:
        raise ForbiddenError("Admin privileges required")
    return principal


def get_current_user(token: Optional[str] = Depends(cookie_scheme)) -> Principal:
    return authenticate(token)


def require_self(request: Request, current: Principal = Depends(get_current_user)) -> Principal:
    return authorize_self(current, request.path_params.get("id"))


def require_admin(current: Principal = Depends(get_current_user)) -> Principal:
    return authorize_admin(current)


# Cookie lifecycle

def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=int(token_lifetime().total_seconds()),
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    # logout only drops the cookie; the token itself stays valid until it expires
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
