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
"""Dict-backed storage backends for tests and embedded use.

Each session collects its writes in an overlay and applies them to the
shared store only when the session exits cleanly, so a failing batch
leaves the store untouched. Native order is insertion order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from filterdao.data.entity import EntityMetadata
from filterdao.data.memory.translator import KeyValueTranslator, MemoryTranslator, Predicate
from filterdao.data.ports.outbound import SortSpec
from filterdao.data.translator import QueryTranslator
from filterdao.kernel.exceptions import BackendUnavailableError, PersistenceError

logger = logging.getLogger(__name__)

_DELETED = object()


class InMemorySession:
    """A unit of work over an :class:`InMemoryBackend`."""

    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend
        # (entity_type, id) -> stored copy or _DELETED, in write order
        self._overlay: dict[tuple[type, Any], Any] = {}
        # keys first created by this session, re-checked for duplicates at commit
        self._inserted: dict[tuple[type, Any], str] = {}

    def _rows(self, metadata: EntityMetadata[Any]) -> dict[Any, Any]:
        """Committed rows merged with this session's pending writes."""
        rows = self._backend._snapshot(metadata.entity_type)
        for (entity_type, entity_id), value in self._overlay.items():
            if entity_type is not metadata.entity_type:
                continue
            if value is _DELETED:
                rows.pop(entity_id, None)
            else:
                rows[entity_id] = value
        return rows

    async def select(
        self,
        metadata: EntityMetadata[Any],
        predicate: Predicate,
        *,
        sort: SortSpec = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Any]:
        matches = [row for row in self._rows(metadata).values() if predicate(row)]
        # stable sorts applied last-key-first give a multi-key order
        for field, descending in reversed(list(sort)):
            present = [row for row in matches if getattr(row, field.name) is not None]
            missing = [row for row in matches if getattr(row, field.name) is None]
            present.sort(key=lambda row, name=field.name: getattr(row, name), reverse=descending)
            # NULLs sort first ascending and last descending, as in SQLite
            matches = present + missing if descending else missing + present
        end = None if limit is None else offset + limit
        return [metadata.copy(row) for row in matches[offset:end]]

    async def count(self, metadata: EntityMetadata[Any], predicate: Predicate) -> int:
        return sum(1 for row in self._rows(metadata).values() if predicate(row))

    async def get(self, metadata: EntityMetadata[Any], id: Any) -> Any | None:
        row = self._rows(metadata).get(id)
        return metadata.copy(row) if row is not None else None

    async def insert(self, metadata: EntityMetadata[Any], entity: Any) -> Any:
        entity_id = metadata.get_id(entity)
        if entity_id is None:
            raise PersistenceError(
                f"{metadata.name} has no identifier and no id factory",
                context={"entity": metadata.name},
            )
        if entity_id in self._rows(metadata):
            raise PersistenceError(
                f"Duplicate {metadata.name} identifier {entity_id!r}",
                context={"entity": metadata.name, "id": entity_id},
            )
        key = (metadata.entity_type, entity_id)
        if self._overlay.get(key) is not _DELETED:
            self._inserted[key] = metadata.name
        self._overlay[key] = metadata.copy(entity)
        return entity_id

    async def update(self, metadata: EntityMetadata[Any], entity: Any) -> bool:
        entity_id = metadata.get_id(entity)
        if entity_id not in self._rows(metadata):
            return False
        self._overlay[(metadata.entity_type, entity_id)] = metadata.copy(entity)
        return True

    async def delete(self, metadata: EntityMetadata[Any], id: Any) -> bool:
        if id not in self._rows(metadata):
            return False
        self._overlay[(metadata.entity_type, id)] = _DELETED
        self._inserted.pop((metadata.entity_type, id), None)
        return True

    def _commit(self) -> None:
        self._backend._apply(self._overlay, self._inserted)
        self._overlay = {}
        self._inserted = {}


class InMemoryBackend:
    """Storage backend keeping detached entity copies in process memory.

    Supports every operator. Usable right after construction; after
    :meth:`stop` new sessions fail with :class:`BackendUnavailableError`
    until :meth:`start` is called again.
    """

    def __init__(self, translator: QueryTranslator[Any] | None = None) -> None:
        self._translator = translator or MemoryTranslator()
        self._tables: dict[type, dict[Any, Any]] = {}
        self._lock = threading.RLock()
        self._running = True

    @property
    def translator(self) -> QueryTranslator[Any]:
        return self._translator

    async def start(self) -> None:
        self._running = True
        logger.info("%s backend started", self._translator.backend_name)

    async def stop(self) -> None:
        self._running = False
        logger.info("%s backend stopped", self._translator.backend_name)

    def clear(self) -> None:
        """Drop every stored entity."""
        with self._lock:
            self._tables.clear()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[InMemorySession]:
        if not self._running:
            logger.warning("%s backend is stopped; rejecting session", self._translator.backend_name)
            raise BackendUnavailableError(f"The {self._translator.backend_name} backend is stopped")
        session = InMemorySession(self)
        yield session
        session._commit()

    def _snapshot(self, entity_type: type) -> dict[Any, Any]:
        with self._lock:
            return dict(self._tables.get(entity_type, {}))

    def _apply(self, overlay: dict[tuple[type, Any], Any], inserted: dict[tuple[type, Any], str]) -> None:
        with self._lock:
            for (entity_type, entity_id), name in inserted.items():
                if entity_id in self._tables.get(entity_type, {}):
                    raise PersistenceError(
                        f"Duplicate {name} identifier {entity_id!r}",
                        context={"entity": name, "id": entity_id},
                    )
            for (entity_type, entity_id), value in overlay.items():
                table = self._tables.setdefault(entity_type, {})
                if value is _DELETED:
                    table.pop(entity_id, None)
                else:
                    table[entity_id] = value


class KeyValueBackend(InMemoryBackend):
    """Hash-store backend: only ``EQUAL``, ``NOT_EQUAL`` and ``IN`` filters.

    Any other operator fails translation with
    :class:`~filterdao.kernel.exceptions.UnsupportedOperatorError`.
    """

    def __init__(self) -> None:
        super().__init__(KeyValueTranslator())
