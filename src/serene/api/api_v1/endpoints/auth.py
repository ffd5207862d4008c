from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from serene.api.auth_deps import StorageDep
from serene.core.security import clear_session, create_session_token, issue_session
from serene.schemas import MessageResponse, Token, UserCreate, UserLogin, UserPublic
from serene.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register(register_data: UserCreate, response: Response, storage: StorageDep):
    """
    Register a new user with username, email and password and start a session.

    Raises:
        DomainConflict: If the username or email is already taken (400)
    """
    user = await AuthService(storage).register_user(register_data)
    issue_session(response, user)
    return user


@router.post("/login", response_model=UserPublic)
async def login(credentials: UserLogin, response: Response, storage: StorageDep):
    """
    Check username and password and start a session.

    Raises:
        Unauthenticated: If the credentials are invalid (401)
    """
    user = await AuthService(storage).authenticate_user(credentials.username, credentials.password)
    issue_session(response, user)
    return user


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    storage: StorageDep,
):
    """OAuth2 password flow; returns the session token for use as a bearer token."""
    user = await AuthService(storage).authenticate_user(form_data.username, form_data.password)
    return Token(access_token=create_session_token(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """End the session. Succeeds whether or not a session existed."""
    clear_session(response)
    return MessageResponse(message="Logged out")
