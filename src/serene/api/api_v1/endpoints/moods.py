from typing import Optional

from fastapi import APIRouter, Query, status

from serene.api.auth_deps import CurrentUser, StorageDep
from serene.core.guard import parse_range
from serene.schemas import MoodCreate, MoodResponse

router = APIRouter()


@router.get("", response_model=list[MoodResponse])
async def read_moods(current_user: CurrentUser, storage: StorageDep):
    """Moods of the current user, newest first."""
    return await storage.list_moods(current_user.id)


@router.get("/range", response_model=list[MoodResponse])
async def read_moods_in_range(
    current_user: CurrentUser,
    storage: StorageDep,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    """
    Moods of the current user between startDate and endDate (inclusive),
    oldest first. Both bounds are ISO-8601 dates or date-times.
    """
    start, end = parse_range(start_date, end_date)
    return await storage.list_moods_in_range(current_user.id, start, end)


@router.post("", response_model=MoodResponse, status_code=status.HTTP_201_CREATED)
async def create_mood(mood_in: MoodCreate, current_user: CurrentUser, storage: StorageDep):
    return await storage.create_mood(current_user.id, mood_in.model_dump())
