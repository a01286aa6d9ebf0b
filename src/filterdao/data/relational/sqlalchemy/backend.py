# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Storage backend built on SQLAlchemy 2.0 async sessions.

Every DAO call gets its own ``AsyncSession`` and transaction from an
``async_sessionmaker``; the transaction commits when the call completes
and rolls back on error. Driver failures are wrapped into the filterdao
error taxonomy here, with the original exception chained.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import URL, ColumnElement, delete, func, select, text, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from filterdao.data.entity import EntityMetadata
from filterdao.data.ports.outbound import SortSpec
from filterdao.data.relational.sqlalchemy.entity import MappingRegistry, TableMapping
from filterdao.data.relational.sqlalchemy.translator import SqlAlchemyTranslator
from filterdao.kernel.exceptions import BackendUnavailableError, PersistenceError

_logger = logging.getLogger(__name__)

_UNAVAILABLE = (OperationalError, InterfaceError, PoolTimeoutError, TimeoutError, OSError)


class SqlAlchemySession:
    """Runs translated predicates and writes inside one ``AsyncSession``."""

    def __init__(self, session: AsyncSession, mappings: MappingRegistry) -> None:
        self._session = session
        self._mappings = mappings

    def _mapping(self, metadata: EntityMetadata[Any]) -> TableMapping[Any]:
        return self._mappings.get(metadata.entity_type)

    async def select(
        self,
        metadata: EntityMetadata[Any],
        predicate: ColumnElement[bool],
        *,
        sort: SortSpec = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Any]:
        mapping = self._mapping(metadata)
        stmt = select(mapping.model).where(predicate)
        for field, descending in sort:
            col = mapping.column(field.name)
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [mapping.to_entity(metadata, row) for row in result.scalars().all()]

    async def count(self, metadata: EntityMetadata[Any], predicate: ColumnElement[bool]) -> int:
        mapping = self._mapping(metadata)
        stmt = select(func.count()).select_from(mapping.model).where(predicate)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def get(self, metadata: EntityMetadata[Any], id: Any) -> Any | None:
        mapping = self._mapping(metadata)
        row = await self._session.get(mapping.model, id)
        return mapping.to_entity(metadata, row) if row is not None else None

    async def insert(self, metadata: EntityMetadata[Any], entity: Any) -> Any:
        mapping = self._mapping(metadata)
        row = mapping.to_row(metadata, entity)
        self._session.add(row)
        await self._session.flush()
        return getattr(row, mapping.attribute(metadata.id_field))

    async def update(self, metadata: EntityMetadata[Any], entity: Any) -> bool:
        mapping = self._mapping(metadata)
        values = mapping.to_values(metadata, entity)
        id_attr = mapping.attribute(metadata.id_field)
        entity_id = values.pop(id_attr)
        stmt = (
            update(mapping.model)
            .where(mapping.column(metadata.id_field) == entity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def delete(self, metadata: EntityMetadata[Any], id: Any) -> bool:
        mapping = self._mapping(metadata)
        stmt = (
            delete(mapping.model)
            .where(mapping.column(metadata.id_field) == id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]


class SqlAlchemyBackend:
    """Relational storage backend over an ``AsyncEngine``.

    Usage::

        mappings = MappingRegistry()
        mappings.register(Person, PersonRow)
        backend = SqlAlchemyBackend.from_url("sqlite+aiosqlite:///people.db", mappings)
        await backend.start()
    """

    def __init__(self, engine: AsyncEngine, mappings: MappingRegistry) -> None:
        self._engine = engine
        self._mappings = mappings
        self._translator = SqlAlchemyTranslator(mappings)
        self._session_factory: async_sessionmaker[AsyncSession] | None = async_sessionmaker(
            engine, expire_on_commit=False
        )

    @classmethod
    def from_url(cls, url: str | URL, mappings: MappingRegistry, **engine_kwargs: Any) -> SqlAlchemyBackend:
        """Create the engine for *url* (extra kwargs go to ``create_async_engine``)."""
        return cls(create_async_engine(url, **engine_kwargs), mappings)

    @property
    def translator(self) -> SqlAlchemyTranslator:
        return self._translator

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def mappings(self) -> MappingRegistry:
        return self._mappings

    async def start(self) -> None:
        """Validate connectivity with a trivial round-trip."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            _logger.warning("Database connectivity check failed: %s", exc)
            raise BackendUnavailableError(f"Cannot connect to database: {exc}") from exc
        _logger.info("Connected to %s", self._engine.url.render_as_string(hide_password=True))

    async def stop(self) -> None:
        """Dispose the engine's connection pool; later sessions are rejected."""
        self._session_factory = None
        await self._engine.dispose()
        _logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[SqlAlchemySession]:
        """One session and transaction: commit on success, rollback on error."""
        factory = self._session_factory
        if factory is None:
            raise BackendUnavailableError("The sqlalchemy backend is stopped")
        try:
            async with factory() as session, session.begin():
                yield SqlAlchemySession(session, self._mappings)
        except IntegrityError as exc:
            raise PersistenceError(f"Constraint violation: {exc.orig}", context={"statement": exc.statement}) from exc
        except _UNAVAILABLE as exc:
            _logger.warning("Database unavailable: %s", exc)
            raise BackendUnavailableError(f"Database unavailable: {exc}") from exc
        except DBAPIError as exc:
            if exc.connection_invalidated:
                _logger.warning("Database connection lost: %s", exc)
                raise BackendUnavailableError(f"Database connection lost: {exc}") from exc
            raise PersistenceError(f"Statement rejected: {exc.orig}", context={"statement": exc.statement}) from exc
