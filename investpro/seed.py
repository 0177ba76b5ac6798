"""
Seed script: writes the demo dataset into the database.

Usage:
    python -m investpro.seed

Also run at startup when ``SEED_DEMO_DATA=true``. The script is idempotent:
records whose id already exists are skipped.
"""

import asyncio
import logging
from typing import Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from investpro.core.logging import setup_logging
from investpro.db.base import create_tables
from investpro.db.session import AsyncSessionLocal, engine
from investpro.demo_data import (
    DEMO_COMPANIES,
    DEMO_INVESTMENTS,
    DEMO_INVESTOR_ACCOUNT,
    DEMO_INVESTOR_INVESTMENTS,
    DEMO_INVESTOR_PORTFOLIO,
    DEMO_USERS,
)

logger = logging.getLogger(__name__)

# Insert order follows the foreign keys.
DEMO_TABLES: List[Sequence[SQLModel]] = [
    [*DEMO_USERS, DEMO_INVESTOR_ACCOUNT],
    DEMO_COMPANIES,
    DEMO_INVESTMENTS,
    [*DEMO_INVESTOR_INVESTMENTS, *DEMO_INVESTOR_PORTFOLIO],
]


async def seed_demo_data(session: AsyncSession) -> Dict[str, int]:
    """
    Insert every demo record not yet present; return inserted counts per table.

    Copies are added, never the module-level demo objects, so the static
    dataset served by ``/demo`` is not bound to a session.
    """
    inserted: Dict[str, int] = {}
    for records in DEMO_TABLES:
        model = type(records[0])
        result = await session.execute(select(model.id))
        existing = set(result.scalars().all())

        fresh = [model(**record.model_dump()) for record in records if record.id not in existing]
        session.add_all(fresh)
        await session.commit()
        inserted[model.__tablename__] = len(fresh)
    return inserted


async def seed() -> None:
    """Create tables and insert the demo dataset."""
    await create_tables(engine)

    async with AsyncSessionLocal() as session:
        inserted = await seed_demo_data(session)

    if not any(inserted.values()):
        logger.info("Database already contains the demo data; nothing to seed.")
    else:
        logger.info(
            "Seeded %s",
            ", ".join(f"{count} {table}" for table, count in inserted.items()),
        )
    await engine.dispose()


def main() -> None:
    setup_logging()
    asyncio.run(seed())


if __name__ == "__main__":
    main()
