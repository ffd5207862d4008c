from typing import Any

from fastapi import APIRouter, Body, Response, status

from serene.api.auth_deps import CurrentUser, StorageDep
from serene.core.guard import authorize_ownership
from serene.schemas import JournalCreate, JournalResponse, JournalUpdate

router = APIRouter()


async def _owned_journal(journal_id: int, current_user, storage):
    journal = await storage.get_journal(journal_id)
    return authorize_ownership(current_user, journal, resource_name="Journal")


@router.get("", response_model=list[JournalResponse])
async def read_journals(current_user: CurrentUser, storage: StorageDep):
    """Journals of the current user, newest first."""
    return await storage.list_journals(current_user.id)


@router.get("/{journal_id}", response_model=JournalResponse)
async def read_journal(journal_id: int, current_user: CurrentUser, storage: StorageDep):
    return await _owned_journal(journal_id, current_user, storage)


@router.post("", response_model=JournalResponse, status_code=status.HTTP_201_CREATED)
async def create_journal(journal_in: JournalCreate, current_user: CurrentUser, storage: StorageDep):
    return await storage.create_journal(current_user.id, journal_in.model_dump())


@router.put("/{journal_id}", response_model=JournalResponse)
async def update_journal(
    journal_id: int,
    current_user: CurrentUser,
    storage: StorageDep,
    payload: Any = Body(...),
):
    """
    Partially update a journal owned by the current user.

    The body is validated after the ownership check, so a foreign or missing
    journal answers 403/404 whatever the body holds.
    """
    await _owned_journal(journal_id, current_user, storage)
    journal_in = JournalUpdate.model_validate(payload)
    return await storage.update_journal(journal_id, journal_in.model_dump(exclude_unset=True))


@router.delete("/{journal_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_journal(journal_id: int, current_user: CurrentUser, storage: StorageDep):
    await _owned_journal(journal_id, current_user, storage)
    await storage.delete_journal(journal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
