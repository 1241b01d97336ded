from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import InvalidTokenError
from sqlmodel import Session, select

from ..config import settings
from ..db import SessionDep
from ..exceptions import NotAuthenticatedError
from ..users.models import User
from .schemas import TokenData
from .utils import verify_password

# auto_error is off so unauthenticated callers reach the handlers; read-only
# analytics answer them with null instead of a 401.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def get_user(session: Session, user_id: int):
    return session.get(User, user_id)


def authenticate_user(session: Session, email: str, password: str) -> Optional[User]:
    user = session.exec(select(User).where(User.email == email)).first()

    if user is None or not verify_password(password, user.password):
        return None
    return user


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def create_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    # Only set exp if an expiration is provided; otherwise, token will not expire.
    if expires_delta is not None:
        expire = datetime.now(timezone.utc) + expires_delta
        to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    data = {**data, "type": ACCESS_TOKEN_TYPE}
    # If no-expiration flag is set and no explicit delta is provided, omit exp.
    if expires_delta is None and settings.access_token_no_expiration:
        return create_token(data, None)
    return create_token(
        data, expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(data: dict, expires_delta: timedelta | None = None):
    return create_token(
        {**data, "type": REFRESH_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.refresh_token_expire_minutes),
    )


def decode_user_id(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[int]:
    """User id from a valid token of the given type, otherwise None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        if payload.get("type") != token_type:
            return None
        user_id = payload.get("user_id")
        if user_id is None:
            return None
        return TokenData(user_id=int(user_id)).user_id
    except (InvalidTokenError, ValueError):
        return None


def resolve_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    return bearer or request.cookies.get(settings.auth_cookie_name)


async def get_optional_user(
    session: SessionDep,
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[User]:
    token = resolve_token(request, token)
    if not token:
        return None

    user_id = decode_user_id(token)
    if user_id is None:
        return None
    return get_user(session, user_id)


async def get_current_user(
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
):
    if current_user is None:
        raise NotAuthenticatedError()
    return current_user


OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]
ActiveUserDep = Annotated[User, Depends(get_current_user)]
