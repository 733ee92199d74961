"""
Signup and login endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from chat.api.deps import get_authenticator
from chat.core.config import Settings, get_settings
from chat.schemas.message import ErrorResponse
from chat.schemas.user import Credentials, CreateUserResponse, LoginResponse
from chat.services.auth import Authenticator

router = APIRouter(tags=["Users"])


@router.post(
    "/users",
    status_code=201,
    response_model=CreateUserResponse,
    responses={409: {"model": ErrorResponse, "description": "Username already exists"}},
    summary="Sign up",
)
async def create_user(
    credentials: Credentials,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> CreateUserResponse:
    """Register a new user. The password is stored hashed."""
    user = authenticator.signup(credentials.username, credentials.password)
    return CreateUserResponse(id=user.id)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Bad credentials"}},
    summary="Log in",
)
async def login(
    credentials: Credentials,
    response: Response,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """
    Open a session and return its bearer token.

    The session itself is identified by a cookie; later requests must carry
    both the cookie and the token in the ``authorization`` header.
    """
    session = authenticator.login(credentials.username, credentials.password)
    response.set_cookie(
        settings.session_cookie_name,
        session.key,
        max_age=settings.session_lifetime_seconds,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(id=session.user_id, token=session.token)
