from fastapi import APIRouter

from serene.api.auth_deps import CurrentUser, StorageDep
from serene.core.guard import authorize_entitlement, catalog_scope
from serene.schemas import MindfulnessSessionResponse

router = APIRouter()


@router.get("", response_model=list[MindfulnessSessionResponse])
async def read_sessions(current_user: CurrentUser, storage: StorageDep):
    """Catalog visible to the current user; premium sessions only for premium users."""
    return await storage.list_mindfulness_sessions(include_premium=catalog_scope(current_user))


@router.get("/{session_id}", response_model=MindfulnessSessionResponse)
async def read_session(session_id: int, current_user: CurrentUser, storage: StorageDep):
    session = await storage.get_mindfulness_session(session_id)
    return authorize_entitlement(current_user, session)
