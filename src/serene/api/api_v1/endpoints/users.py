from fastapi import APIRouter, Response

from serene.api.auth_deps import CurrentUser, StorageDep
from serene.core.security import issue_session
from serene.schemas import MessageResponse, PasswordUpdate, UserProfileUpdate, UserPublic
from serene.services.auth_service import AuthService

router = APIRouter()


@router.get("", response_model=UserPublic)
async def read_user_me(current_user: CurrentUser):
    """Get current user."""
    return current_user


@router.put("/profile", response_model=UserPublic)
async def update_profile(
    profile_in: UserProfileUpdate,
    response: Response,
    current_user: CurrentUser,
    storage: StorageDep,
):
    """Update username and/or email of the current user and refresh the session."""
    user = await AuthService(storage).update_profile(current_user, profile_in)
    issue_session(response, user)
    return user


@router.put("/password", response_model=MessageResponse)
async def update_password(
    password_in: PasswordUpdate,
    response: Response,
    current_user: CurrentUser,
    storage: StorageDep,
):
    """Change the password after verifying the current one."""
    user = await AuthService(storage).change_password(current_user, password_in)
    issue_session(response, user)
    return MessageResponse(message="Password updated successfully")
