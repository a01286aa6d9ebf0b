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
"""Generic async DAO over any storage backend."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar, cast, get_args, get_origin

from filterdao.data.entity import EntityMetadata, EntityRegistry, default_registry
from filterdao.data.filter import FilterMap
from filterdao.data.paging import Page, Pageable
from filterdao.data.ports.outbound import SortSpec, StorageBackend, StorageSession
from filterdao.kernel.exceptions import BackendUnavailableError, DaoException, NotFoundError

ID = TypeVar("ID")
T = TypeVar("T")

logger = logging.getLogger(__name__)


class GenericDao(Generic[ID, T]):
    """CRUD and filtered reads for one entity type.

    The DAO holds no entity state: it is bound to entity metadata and a
    storage backend, and every call runs in its own backend session.
    Filter maps are validated and translated before a session is opened,
    so malformed filters never reach the backend.

    Type Parameters:
        ID: The identifier type (e.g. str, int, UUID).
        T: The entity type (a registered dataclass).

    Usage::

        class PersonDao(GenericDao[str, Person]):
            async def find_one_by_name(self, name: str) -> Person | None:
                return await self.find_one_by_filter({"name": Filter.eq(name)})

        dao = PersonDao(backend)
    """

    _entity_type: type | None = None
    _id_type: type | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            if get_origin(base) is GenericDao:
                args = get_args(base)
                if args and not isinstance(args[0], TypeVar):
                    cls._id_type = args[0]
                if len(args) > 1 and not isinstance(args[1], TypeVar):
                    cls._entity_type = args[1]
                break

    def __init__(
        self,
        backend: StorageBackend,
        metadata: EntityMetadata[T] | None = None,
        *,
        registry: EntityRegistry | None = None,
    ) -> None:
        if metadata is None:
            entity_type = type(self)._entity_type
            if entity_type is None:
                raise TypeError(
                    f"{type(self).__name__} requires either a GenericDao[ID, Entity] declaration "
                    "or an explicit metadata argument"
                )
            metadata = (registry if registry is not None else default_registry).get(entity_type)
        self._backend = backend
        self._metadata: EntityMetadata[T] = metadata

    @property
    def metadata(self) -> EntityMetadata[T]:
        return self._metadata

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[StorageSession]:
        """Open one backend session, surfacing connectivity failures uniformly."""
        try:
            async with self._backend.session() as session:
                yield session
        except DaoException:
            raise
        except (ConnectionError, TimeoutError, OSError) as exc:
            raise BackendUnavailableError(
                f"Storage backend unavailable: {exc}",
                context={"entity": self._metadata.name},
            ) from exc

    def _translate(self, filter_map: FilterMap | None) -> Any:
        return self._backend.translator.translate(self._metadata, filter_map or {})

    def _sort_spec(self, pageable: Pageable | None) -> SortSpec:
        if pageable is None:
            return ()
        return self._backend.translator.validate_sort(self._metadata, pageable.sort)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _with_generated_id(self, entity: T) -> T:
        """*entity*, or a copy carrying a fresh id when it has none."""
        meta = self._metadata
        if meta.get_id(entity) is not None or meta.id_factory is None:
            return entity
        pending = meta.copy(entity)
        meta.set_id(pending, meta.id_factory())
        return pending

    def create_entity(self) -> T:
        """A fresh, default-initialized entity. Nothing is persisted."""
        return self._metadata.factory()

    async def create(self, entity: T) -> ID:
        """Persist a new entity and return its identifier.

        An entity without an identifier gets one from the metadata's
        ``id_factory`` (or from the backend, e.g. autoincrement keys); the
        stored identifier is written back onto *entity* once the insert has
        succeeded; a failed create leaves *entity* untouched.

        Raises:
            PersistenceError: constraint violation such as a duplicate id.
        """
        meta = self._metadata
        pending = self._with_generated_id(entity)
        async with self._session() as session:
            stored_id = await session.insert(meta, pending)
        meta.set_id(entity, stored_id)
        logger.debug("Created %s id=%s", meta.name, stored_id)
        return cast(ID, stored_id)

    async def create_all(self, entities: Iterable[T]) -> list[ID]:
        """Persist several new entities in one session; all or nothing."""
        meta = self._metadata
        batch = list(entities)
        pending = [self._with_generated_id(entity) for entity in batch]
        ids: list[ID] = []
        async with self._session() as session:
            for entity in pending:
                ids.append(cast(ID, await session.insert(meta, entity)))
        for entity, stored_id in zip(batch, ids, strict=True):
            meta.set_id(entity, stored_id)
        logger.debug("Created %d %s entities", len(ids), meta.name)
        return ids

    async def update(self, entity: T) -> None:
        """Overwrite every field of an existing entity.

        Raises:
            NotFoundError: no entity with this identifier is stored; the
                backend is left unchanged.
        """
        meta = self._metadata
        entity_id = meta.get_id(entity)
        if entity_id is None:
            raise NotFoundError(f"{meta.name} without an identifier cannot be updated", context={"entity": meta.name})
        async with self._session() as session:
            changed = await session.update(meta, entity)
        if not changed:
            raise NotFoundError(f"{meta.name} {entity_id!r} not found", context={"entity": meta.name, "id": entity_id})
        logger.debug("Updated %s id=%s", meta.name, entity_id)

    async def delete(self, id: ID) -> None:
        """Remove an entity by identifier.

        Raises:
            NotFoundError: nothing is stored under *id* (including a second
                delete of the same id).
        """
        meta = self._metadata
        async with self._session() as session:
            removed = await session.delete(meta, id)
        if not removed:
            raise NotFoundError(f"{meta.name} {id!r} not found", context={"entity": meta.name, "id": id})
        logger.debug("Deleted %s id=%s", meta.name, id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, id: ID) -> T | None:
        """The entity stored under *id*, or ``None``."""
        async with self._session() as session:
            return cast("T | None", await session.get(self._metadata, id))

    async def exists_by_id(self, id: ID) -> bool:
        return await self.find_by_id(id) is not None

    async def find_by_filter(self, filter_map: FilterMap | None, pageable: Pageable | None = None) -> list[T]:
        """All entities matching every filter in *filter_map*.

        An empty map matches every entity. Results come in the backend's
        native order unless *pageable* carries a sort.
        """
        predicate = self._translate(filter_map)
        sort = self._sort_spec(pageable)
        offset = pageable.offset if pageable is not None else 0
        limit = pageable.limit if pageable is not None else None
        async with self._session() as session:
            rows = await session.select(self._metadata, predicate, sort=sort, offset=offset, limit=limit)
        return cast(list[T], rows)

    async def find_one_by_filter(self, filter_map: FilterMap | None) -> T | None:
        """One entity matching *filter_map*, or ``None``.

        When several entities match, which one is returned is up to the
        backend's native order; no ordering is guaranteed.
        """
        predicate = self._translate(filter_map)
        async with self._session() as session:
            rows = await session.select(self._metadata, predicate, limit=1)
        return cast("T | None", rows[0]) if rows else None

    async def find_page_by_filter(self, filter_map: FilterMap | None, pageable: Pageable) -> Page[T]:
        """One page of matches plus the total match count."""
        predicate = self._translate(filter_map)
        sort = self._sort_spec(pageable)
        async with self._session() as session:
            total = await session.count(self._metadata, predicate)
            rows = await session.select(
                self._metadata, predicate, sort=sort, offset=pageable.offset, limit=pageable.limit
            )
        size = pageable.size if pageable.size is not None else max(total, 1)
        return Page(items=cast(list[T], rows), total=total, page=pageable.page, size=size)

    async def find_all(self, pageable: Pageable | None = None) -> list[T]:
        return await self.find_by_filter({}, pageable)

    async def count(self) -> int:
        return await self.count_by_filter({})

    async def count_by_filter(self, filter_map: FilterMap | None) -> int:
        """Number of entities matching *filter_map*."""
        predicate = self._translate(filter_map)
        async with self._session() as session:
            return await session.count(self._metadata, predicate)
