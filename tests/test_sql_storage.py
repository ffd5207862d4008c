"""
Relational backing of the store, against an in-memory SQLite database.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from serene.core.errors import DomainConflict, NotFound
from serene.crud.crud_mood import mood as crud_mood
from serene.crud.crud_user import user as crud_user
from serene.crud.sql import SqlStorage
from serene.db.init_db import seed_catalog
from serene.models import Base, User

DAY = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def db():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def storage(db):
    return SqlStorage(db)


async def make_user(storage, username="alice"):
    return await storage.create_user(username=username, password_hash="hash", email=f"{username}@example.com")


async def test_create_user_assigns_id_and_timestamp(storage):
    user = await make_user(storage)
    assert user.id == 1
    assert user.is_premium is False
    assert user.created_at is not None
    assert (await storage.get_user_by_username("ALICE")).id == user.id
    assert (await storage.get_user_by_email("Alice@Example.com")).id == user.id


async def test_duplicate_user_is_a_conflict(storage):
    await make_user(storage)
    with pytest.raises(DomainConflict, match="Username already exists"):
        await storage.create_user(username="Alice", password_hash="hash", email="new@example.com")
    with pytest.raises(DomainConflict, match="Email already exists"):
        await storage.create_user(username="alice2", password_hash="hash", email="ALICE@example.com")


async def test_unique_index_backs_the_precheck(db, storage):
    await make_user(storage)

    # skip the lookups and let the lowercase unique index decide
    with pytest.raises(DomainConflict, match="Username already exists"):
        await crud_user._commit_user(db, User(username="ALICE", password="hash", email="x@example.com"))
    with pytest.raises(DomainConflict, match="Email already exists"):
        await crud_user._commit_user(db, User(username="other", password="hash", email="ALICE@example.com"))

    assert await crud_user.count(db) == 1


async def test_profile_update_conflict(storage):
    alice = await make_user(storage, "alice")
    await make_user(storage, "bob")
    with pytest.raises(DomainConflict):
        await storage.update_user_profile(alice.id, {"username": "BOB"})
    updated = await storage.update_user_profile(alice.id, {"email": "alice@new.example.com"})
    assert updated.email == "alice@new.example.com"
    assert updated.username == "alice"


async def test_missing_user_updates_are_not_found(storage):
    with pytest.raises(NotFound):
        await storage.set_user_premium(42, True)


async def test_subscription_index(storage):
    alice = await make_user(storage, "alice")
    bob = await make_user(storage, "bob")
    await storage.set_user_billing(alice.id, customer_id="cus_1", subscription_id="sub_1")

    assert (await storage.get_user_by_subscription_id("sub_1")).id == alice.id
    with pytest.raises(DomainConflict):
        await storage.set_user_billing(bob.id, customer_id="cus_2", subscription_id="sub_1")

    await storage.set_user_billing(alice.id, customer_id="cus_1", subscription_id=None)
    assert await storage.get_user_by_subscription_id("sub_1") is None


async def test_journal_ids_are_never_reused(storage):
    alice = await make_user(storage)
    first = await storage.create_journal(alice.id, {"title": "T", "content": "C", "mood": 3})
    assert await storage.delete_journal(first.id) is True
    assert await storage.delete_journal(first.id) is False

    second = await storage.create_journal(alice.id, {"title": "T", "content": "C", "mood": 3})
    assert second.id > first.id
    assert await storage.get_journal(first.id) is None


async def test_journal_update_keeps_owner_and_id(storage):
    alice = await make_user(storage, "alice")
    bob = await make_user(storage, "bob")
    journal = await storage.create_journal(alice.id, {"title": "T", "content": "C", "mood": 3})

    updated = await storage.update_journal(journal.id, {"mood": 4, "user_id": bob.id, "id": 99})
    assert updated.id == journal.id
    assert updated.user_id == alice.id
    assert updated.mood == 4
    assert updated.title == "T"

    with pytest.raises(NotFound):
        await storage.update_journal(999, {"mood": 1})


async def test_mood_listing_orders(db, storage):
    alice = await make_user(storage)
    for days_ago, rating in ((2, 5), (1, 3), (0, 1)):
        await crud_mood.create(
            db, obj_in={"rating": rating, "note": None}, user_id=alice.id, created_at=DAY - timedelta(days=days_ago)
        )

    assert [m.rating for m in await storage.list_moods(alice.id)] == [1, 3, 5]

    in_range = await storage.list_moods_in_range(
        alice.id, DAY - timedelta(days=1, hours=1), DAY + timedelta(hours=1)
    )
    assert [m.rating for m in in_range] == [3, 1]


async def test_seed_catalog_runs_once(storage):
    assert await seed_catalog(storage) == 5
    assert await seed_catalog(storage) == 0

    free = await storage.list_mindfulness_sessions(include_premium=False)
    everything = await storage.list_mindfulness_sessions(include_premium=True)
    assert len(free) == 3
    assert len(everything) == 5
    assert not any(s.is_premium for s in free)


async def test_get_mood_by_id(storage):
    alice = await make_user(storage)
    created = await storage.create_mood(alice.id, {"rating": 4, "note": "calm"})

    fetched = await storage.get_mood(created.id)
    assert fetched.id == created.id
    assert fetched.user_id == alice.id
    assert fetched.rating == 4
    assert fetched.note == "calm"
    assert await storage.get_mood(created.id + 1) is None
