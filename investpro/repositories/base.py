"""
Generic async repository.

``BaseRepository[T]`` implements CRUD on top of an ``AsyncSession``;
entity repositories subclass it and add their own queries.

- Lists are ordered by primary key so pagination is stable.
- ``IntegrityError`` is left to the services, which turn it into the
  right domain error (duplicate email, dangling reference, ...).
- ``OperationalError`` rolls the session back before propagating.
- Every call goes through the database circuit breaker.
"""

import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import Select
from sqlmodel import SQLModel

from investpro.core.resilience import db_circuit_breaker

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD repository for SQLModel entities.

    Parameters
    ----------
    model : Type[ModelType]
        The SQLModel class this repository manages.
    db : AsyncSession
        The request's session.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def _guarded(self, func: Callable[[], Awaitable[Any]]) -> Any:
        return await db_circuit_breaker.call(func)

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except OperationalError:
            await self.db.rollback()
            logger.error("OperationalError during %s for %s", action, self.model.__name__)
            raise

    def _ordered(self, stmt: Select) -> Select:
        return stmt.order_by(*self.model.__table__.primary_key.columns)

    async def _scalars(self, stmt: Select) -> List[ModelType]:
        async def _run() -> List[ModelType]:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._guarded(_run)

    # ── Queries ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch by primary key; ``None`` when absent."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._guarded(_get)

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """One page of entities in primary-key order."""
        stmt = self._ordered(select(self.model)).offset(skip).limit(limit)
        return await self._scalars(stmt)

    async def list_all(self) -> List[ModelType]:
        """Every entity; used to load collections for aggregation."""
        return await self._scalars(self._ordered(select(self.model)))

    async def count(self) -> int:
        async def _count() -> int:
            result = await self.db.execute(select(func.count()).select_from(self.model))
            return result.scalar_one()

        return await self._guarded(_count)

    # ── Commands ──

    async def create(self, obj_in: ModelType) -> ModelType:
        """Insert and return the refreshed entity."""

        async def _create() -> ModelType:
            self.db.add(obj_in)
            await self._commit("create")
            await self.db.refresh(obj_in)
            return obj_in

        return await self._guarded(_create)

    async def update(self, entity: ModelType) -> ModelType:
        """Persist attribute changes made by the caller on ``entity``."""

        async def _update() -> ModelType:
            merged = await self.db.merge(entity)
            await self._commit("update")
            await self.db.refresh(merged)
            return merged

        return await self._guarded(_update)

    async def delete(self, id: Any) -> bool:
        """Delete by primary key; ``False`` when nothing matched."""

        async def _delete() -> bool:
            entity = await self.db.get(self.model, id)
            if entity is None:
                return False
            await self.db.delete(entity)
            await self._commit("delete")
            return True

        return await self._guarded(_delete)
