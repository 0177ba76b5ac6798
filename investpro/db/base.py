"""
Schema bootstrap.

Importing :mod:`investpro.models` registers every table with
``SQLModel.metadata``; :func:`create_tables` then issues ``CREATE TABLE``
for anything missing.
"""

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel

import investpro.models  # noqa: F401


async def create_tables(engine: AsyncEngine) -> None:
    """Create all registered tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
