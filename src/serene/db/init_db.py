import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from yaml import YAMLError, safe_load

from serene.core.config import settings
from serene.crud.storage import Storage
from serene.schemas import MindfulnessSessionCreate

logger = logging.getLogger(__name__)


def load_catalog(path: Optional[Path] = None) -> list[MindfulnessSessionCreate]:
    """Load the mindfulness catalog seed file.

    Args:
        path: YAML file with a top-level ``sessions`` list. Defaults to
            ``settings.CATALOG_PATH``.

    Returns:
        list[MindfulnessSessionCreate]: Validated catalog entries; empty when
        the file does not exist.

    Raises:
        ValueError: If the file is not valid YAML or an entry is malformed
    """
    path = Path(path or settings.CATALOG_PATH)
    if not path.exists():
        logger.warning(f"Catalog seed file not found at {path} - skipping")
        return []

    try:
        with open(path, "r") as f:
            data = safe_load(f) or {}
    except YAMLError as e:
        raise ValueError(f"Invalid catalog file {path}: {e}") from e

    try:
        return [MindfulnessSessionCreate.model_validate(item) for item in data.get("sessions", [])]
    except ValidationError as e:
        raise ValueError(f"Invalid catalog entry in {path}: {e}") from e


async def seed_catalog(storage: Storage, path: Optional[Path] = None) -> int:
    """Seed the catalog if it is empty. Returns the number of sessions created."""
    existing = await storage.count_mindfulness_sessions()
    if existing:
        logger.info(f"Mindfulness catalog already has {existing} sessions - skipping seed")
        return 0

    entries = load_catalog(path)
    created = await storage.add_mindfulness_sessions(e.model_dump() for e in entries)
    logger.info(f"Seeded {len(created)} mindfulness sessions")
    return len(created)


async def init_db() -> None:
    """Create tables and seed the catalog in the configured database."""
    from serene.crud.sql import SqlStorage
    from serene.db.session import AsyncSessionLocal, create_tables

    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            await seed_catalog(SqlStorage(db))
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {str(e)}")
            await db.rollback()
            raise


def main() -> None:
    """Main function to run database initialization."""
    try:
        asyncio.run(init_db())
        print("Database initialization completed successfully!")
    except Exception as e:
        print(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
