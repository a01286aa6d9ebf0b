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
"""Outbound ports: the storage backend contract the DAO core relies on.

A backend provides, per entity type, scoped sessions that can run a
translated predicate, insert, update by identifier and delete by
identifier, plus a :class:`~filterdao.data.translator.QueryTranslator`
for its native predicate language.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable

from filterdao.data.entity import EntityMetadata, FieldInfo
from filterdao.data.translator import QueryTranslator

SortSpec = Sequence[tuple[FieldInfo, bool]]
"""Resolved sort orders: ``(field, descending)`` pairs."""


@runtime_checkable
class StorageSession(Protocol):
    """One unit of backend work; released when its context exits.

    Entities passed in and returned are detached plain objects: the
    session never hands out instances it keeps using internally.
    """

    async def select(
        self,
        metadata: EntityMetadata[Any],
        predicate: Any,
        *,
        sort: SortSpec = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Any]: ...

    async def count(self, metadata: EntityMetadata[Any], predicate: Any) -> int: ...

    async def get(self, metadata: EntityMetadata[Any], id: Any) -> Any | None: ...

    async def insert(self, metadata: EntityMetadata[Any], entity: Any) -> Any:
        """Store a new entity and return its identifier (possibly backend-assigned)."""
        ...

    async def update(self, metadata: EntityMetadata[Any], entity: Any) -> bool:
        """Overwrite every field of the stored entity; ``False`` if it is absent."""
        ...

    async def delete(self, metadata: EntityMetadata[Any], id: Any) -> bool:
        """Remove the stored entity; ``False`` if it is absent."""
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """A storage technology the generic DAO can run against."""

    @property
    def translator(self) -> QueryTranslator[Any]: ...

    def session(self) -> AbstractAsyncContextManager[StorageSession]: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
