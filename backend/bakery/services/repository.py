"""
Generic async repository.

Concrete repositories set ``model`` and list the columns the free-text
filter searches. Database errors raised while flushing are translated into
the user-facing errors from ``bakery.core.exceptions``.
"""

import uuid
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from bakery.core.exceptions import (
    ConcurrentUpdateError,
    DataIntegrityError,
    ReferentialIntegrityError,
)
from bakery.core.logging import get_logger
from bakery.database.base import BaseModel

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def constraint_name(error: IntegrityError) -> Optional[str]:
    """Name of the violated constraint, when the driver reports it."""
    orig = getattr(error, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None


class CrudRepository(Generic[ModelT]):
    """
    Data access for one aggregate type.

    Attributes:
        model: Mapped class handled by this repository
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    def search_columns(self) -> Sequence[ColumnElement[Any]]:
        """Columns matched by the free-text filter."""
        return ()

    def order_by(self) -> Sequence[ColumnElement[Any]]:
        return (self.model.id,)

    def filter_condition(self, filter_text: Optional[str]) -> Optional[ColumnElement[bool]]:
        """
        Case-insensitive substring match over ``search_columns``.

        Returns:
            None when there is nothing to filter on
        """
        if not filter_text:
            return None
        pattern = f"%{escape_like(filter_text)}%"
        return or_(
            *(column.ilike(pattern, escape=LIKE_ESCAPE) for column in self.search_columns())
        )

    def _filtered(self, statement: Select, filter_text: Optional[str]) -> Select:
        condition = self.filter_condition(filter_text)
        if condition is not None:
            statement = statement.where(condition)
        return statement

    async def get(self, entity_id: uuid.UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def find_matching(
        self,
        filter_text: Optional[str],
        offset: int,
        limit: int,
    ) -> list[ModelT]:
        """
        One page of entities matching the filter.

        Args:
            filter_text: Free-text filter, ignored when empty
            offset: Rows to skip
            limit: Maximum rows to return
        """
        statement = self._filtered(select(self.model), filter_text)
        statement = statement.order_by(*self.order_by()).offset(offset).limit(limit)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_matching(self, filter_text: Optional[str]) -> int:
        statement = self._filtered(select(func.count()).select_from(self.model), filter_text)
        result = await self.session.execute(statement)
        return result.scalar_one()

    async def count(self) -> int:
        return await self.count_matching(None)

    async def save(self, entity: ModelT) -> ModelT:
        """
        Add the entity to the session and flush it.

        Raises:
            ConcurrentUpdateError: If the row changed since it was loaded
            DataIntegrityError: If a constraint rejected the row
        """
        self.session.add(entity)
        await self._flush("save", entity, DataIntegrityError)
        logger.debug("Entity saved", model=self.model.__name__, entity_id=str(entity.id))
        return entity

    async def delete(self, entity: ModelT) -> None:
        """
        Delete the entity and flush.

        Raises:
            ConcurrentUpdateError: If the row changed since it was loaded
            ReferentialIntegrityError: If other rows still reference it
        """
        await self.session.delete(entity)
        await self._flush("delete", entity, ReferentialIntegrityError)
        logger.info("Entity deleted", model=self.model.__name__, entity_id=str(entity.id))

    async def _flush(
        self,
        operation: str,
        entity: ModelT,
        integrity_error: type[DataIntegrityError],
    ) -> None:
        # A rollback expires loaded rows, so read the id first.
        entity_id = str(entity.id) if entity.id is not None else None
        try:
            await self.session.flush()
        except StaleDataError as e:
            await self.session.rollback()
            logger.warning(
                "Concurrent update detected",
                model=self.model.__name__,
                entity_id=entity_id,
                operation=operation,
            )
            raise ConcurrentUpdateError(
                model=self.model.__name__, entity_id=entity_id
            ) from e
        except IntegrityError as e:
            await self.session.rollback()
            constraint = constraint_name(e)
            logger.warning(
                "Integrity error",
                model=self.model.__name__,
                entity_id=entity_id,
                operation=operation,
                constraint=constraint,
            )
            raise integrity_error(
                model=self.model.__name__,
                entity_id=entity_id,
                constraint=constraint,
            ) from e
