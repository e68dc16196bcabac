"""Base repository: generic reads and writes over a shared session factory.

Each operation opens its own short-lived AsyncSession, so one repository
instance can be shared by concurrent callers. Driver errors are translated
to StoreFailureException; subclasses map unique violations via
_on_integrity_error.
"""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recordstore.domain.exceptions import RecordStoreException, StoreFailureException
from recordstore.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, get_by_ids, get_one_by, create and update_by_id.

    Subclasses override _on_integrity_error to turn constraint violations
    into domain errors. LSP: subclasses are substitutable for BaseRepository.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[ModelType],
    ) -> None:
        self.session_factory = session_factory
        self.model = model

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Read session; closes on exit. Translates driver errors."""
        try:
            async with self.session_factory() as session:
                yield session
        except IntegrityError as e:
            raise self._on_integrity_error(operation, e) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreFailureException(operation, str(e)) from e

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Write session: commits on success, rolls back on exception. Translates driver errors."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            raise self._on_integrity_error(operation, e) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreFailureException(operation, str(e)) from e

    def _on_integrity_error(
        self, operation: str, exc: IntegrityError
    ) -> RecordStoreException:
        """Override to map constraint violations; default is a store failure."""
        return StoreFailureException(operation, str(exc))

    async def _get_by_id(self, session: AsyncSession, entity_id: int) -> ModelType | None:
        model: Any = self.model
        result = await session.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """Return a single record by primary key, or None."""
        async with self._session("get_by_id") as session:
            return await self._get_by_id(session, entity_id)

    async def get_by_ids(self, entity_ids: Iterable[int]) -> list[ModelType]:
        """Return existing records among entity_ids in one IN query (no order guarantee)."""
        ids = list(dict.fromkeys(entity_ids))
        if not ids:
            return []
        model: Any = self.model
        async with self._session("get_by_ids") as session:
            result = await session.execute(select(self.model).where(model.id.in_(ids)))
            return list(result.scalars().all())

    async def get_one_by(self, column: str, value: Any) -> ModelType | None:
        """Return the record whose unique column equals value, or None."""
        async with self._session(f"get_by_{column}") as session:
            result = await session.execute(
                select(self.model).where(getattr(self.model, column) == value)
            )
            return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record; returns it with server defaults loaded."""
        async with self._transaction("create") as session:
            session.add(obj)
            await session.flush()
            await session.refresh(obj)
        return obj

    async def update_by_id(
        self, entity_id: int, changes: dict[str, Any]
    ) -> ModelType | None:
        """Apply changes to the record with entity_id; None if it does not exist.

        Raises ValueError for a change naming an unknown column.
        """
        columns = self.model.__table__.columns
        unknown = [name for name in changes if name not in columns or name == "id"]
        if unknown:
            raise ValueError(
                f"Cannot update {self.model.__name__}: unknown or immutable columns {unknown}"
            )
        async with self._transaction("update") as session:
            obj = await self._get_by_id(session, entity_id)
            if obj is None:
                return None
            for name, value in changes.items():
                setattr(obj, name, value)
            await session.flush()
            await session.refresh(obj)
        return obj
