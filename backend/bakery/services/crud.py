"""
Generic CRUD service.

A service wraps one repository and adds the acting user to every write so
that subclasses can apply per-entity rules (locked users, self deletion,
friendly duplicate name errors) by overriding ``save`` or ``delete``.
"""

import uuid
from dataclasses import dataclass
from typing import Generic, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bakery.core.exceptions import (
    ConcurrentUpdateError,
    DataValidationError,
    EntityNotFoundError,
)
from bakery.core.logging import get_logger
from bakery.database.models import User
from bakery.services.repository import CrudRepository, ModelT

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page of ``size`` rows."""

    page: int = 0
    size: int = 50

    @property
    def offset(self) -> int:
        return self.page * self.size


class CrudService(Generic[ModelT]):
    """
    Create, load, save and delete one entity type.

    Attributes:
        repository: Data access for the entity type
    """

    repository_class: type[CrudRepository]

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository: CrudRepository[ModelT] = self.repository_class(session)
        self.logger = logger.bind(service=self.__class__.__name__)

    def create_new(self, current_user: User) -> ModelT:
        """Unsaved entity with defaults filled in."""
        return self.repository.model()

    async def load(self, entity_id: uuid.UUID) -> ModelT:
        """
        Load an entity by id.

        Raises:
            EntityNotFoundError: If no entity has this id
        """
        entity = await self.repository.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(
                model=self.repository.model.__name__, entity_id=str(entity_id)
            )
        return entity

    async def save(self, current_user: User, entity: ModelT) -> ModelT:
        saved = await self.repository.save(entity)
        self.logger.info(
            "Entity saved",
            entity_id=str(saved.id),
            acting_user_id=str(current_user.id),
        )
        return saved

    async def delete(self, current_user: User, entity: Optional[ModelT]) -> None:
        """
        Delete an entity.

        Raises:
            EntityNotFoundError: If ``entity`` is None
            ReferentialIntegrityError: If other rows reference the entity
        """
        if entity is None:
            raise EntityNotFoundError(model=self.repository.model.__name__)
        await self.repository.delete(entity)
        self.logger.info(
            "Entity deleted",
            entity_id=str(entity.id),
            acting_user_id=str(current_user.id),
        )

    async def delete_by_id(self, current_user: User, entity_id: uuid.UUID) -> None:
        await self.delete(current_user, await self.load(entity_id))

    async def count(self) -> int:
        return await self.repository.count()

    @staticmethod
    def check_version(entity: ModelT, expected_version: Optional[int]) -> None:
        """
        Compare the version a client edited against the stored one.

        Every update must name the version it was based on.

        Raises:
            DataValidationError: If no version was sent
            ConcurrentUpdateError: If the versions differ
        """
        if expected_version is None:
            raise DataValidationError(fields=["version"], entity_id=str(entity.id))
        if entity.version != expected_version:
            raise ConcurrentUpdateError(
                entity_id=str(entity.id),
                expected_version=expected_version,
                actual_version=entity.version,
            )


class FilterableCrudService(CrudService[ModelT]):
    """CRUD service with free-text search and paging."""

    async def find_any_matching(
        self,
        filter_text: Optional[str],
        page: PageRequest,
    ) -> list[ModelT]:
        return await self.repository.find_matching(filter_text, page.offset, page.size)

    async def count_any_matching(self, filter_text: Optional[str]) -> int:
        return await self.repository.count_matching(filter_text)
