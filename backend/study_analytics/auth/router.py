import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import select

from ..config import settings
from ..db import SessionDep
from ..users.models import User
from ..users.schemas import UserPublic
from .schemas import Token, UserRegister
from .deps import (
    REFRESH_TOKEN_TYPE,
    ActiveUserDep,
    authenticate_user,
    create_access_token,
    create_refresh_token,
    decode_user_id,
    get_user,
    oauth2_scheme,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(response: Response, user: User) -> Token:
    access_token = create_access_token(data={"user_id": str(user.id)})
    refresh_token = create_refresh_token(data={"user_id": str(user.id)})
    # Browser clients authenticate with the cookie instead of the bearer header
    response.set_cookie(
        settings.auth_cookie_name,
        access_token,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )
    return Token(
        access_token=access_token, refresh_token=refresh_token, token_type="bearer"
    )


@router.post(
    "/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED
)
def register(user: UserRegister, session: SessionDep):
    existing = session.exec(select(User).where(User.email == user.email)).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    db_user = User(**user.model_dump())
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    logger.info("Registered user %d", db_user.id)

    return db_user


@router.post("/token", response_model=Token)
def login_for_access_token(
    session: SessionDep,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    user = authenticate_user(session, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _issue_tokens(response, user)


@router.post("/token/refresh", response_model=Token)
def refresh_token_endpoint(
    session: SessionDep,
    response: Response,
    refresh_token: Optional[str] = Depends(oauth2_scheme),
):
    """Exchange a valid refresh token for a new access & refresh token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = decode_user_id(refresh_token, REFRESH_TOKEN_TYPE) if refresh_token else None
    if user_id is None:
        raise credentials_exception

    user = get_user(session, user_id)
    if user is None:
        raise credentials_exception

    return _issue_tokens(response, user)


@router.get("/me", response_model=UserPublic)
def read_current_user(current_user: ActiveUserDep):
    return current_user
