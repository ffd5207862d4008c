"""Storage and authentication dependencies for FastAPI endpoints."""
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from serene.core.config import settings
from serene.core.guard import require_authenticated
from serene.core.security import decode_session_token
from serene.crud.sql import SqlStorage
from serene.crud.storage import Storage
from serene.db.session import SessionDep
from serene.models import User

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/token", auto_error=False)


async def get_storage(db: SessionDep) -> Storage:
    """Relational storage bound to the request's session. Tests override this."""
    return SqlStorage(db)


StorageDep = Annotated[Storage, Depends(get_storage)]


async def get_optional_user(
    request: Request,
    storage: StorageDep,
    bearer: Optional[str] = Depends(oauth2_scheme),
) -> Optional[User]:
    """Resolve the principal from the session cookie or a bearer token."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME) or bearer
    if not token:
        return None

    claims = decode_session_token(token)
    if claims is None:
        return None

    user = await storage.get_user(int(claims["sub"]))
    if user is None:
        logger.warning(f"Session refers to unknown user {claims['sub']}")
    return user


async def get_current_user(principal: Annotated[Optional[User], Depends(get_optional_user)]) -> User:
    """Get the current authenticated user."""
    return require_authenticated(principal)


# Type aliases for dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
