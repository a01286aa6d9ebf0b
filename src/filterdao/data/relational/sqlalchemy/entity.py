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
"""Declarative base and entity-to-row mappings.

Entities stay plain dataclasses; each one is paired with a SQLAlchemy row
model through a :class:`TableMapping`, which copies field values across in
both directions. Entity fields map to model attributes of the same name
unless ``field_map`` says otherwise.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import DeclarativeBase

from filterdao.data.entity import EntityMetadata

T = TypeVar("T")


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all filterdao row models."""


@dataclasses.dataclass(frozen=True)
class TableMapping(Generic[T]):
    """Pairs an entity type with its row model.

    Attributes:
        entity_type: The plain entity class.
        model: The SQLAlchemy row model.
        field_map: Entity field name -> model attribute name, where they differ.
    """

    entity_type: type[T]
    model: type[Any]
    field_map: Mapping[str, str] = dataclasses.field(default_factory=dict)

    def attribute(self, field: str) -> str:
        return self.field_map.get(field, field)

    def column(self, field: str) -> Any:
        """The mapped column attribute, usable in SQL expressions."""
        return getattr(self.model, self.attribute(field))

    def to_values(self, metadata: EntityMetadata[T], entity: T) -> dict[str, Any]:
        """Model attribute -> value for every declared entity field."""
        return {self.attribute(name): value for name, value in metadata.to_dict(entity).items()}

    def to_row(self, metadata: EntityMetadata[T], entity: T) -> Any:
        return self.model(**self.to_values(metadata, entity))

    def to_entity(self, metadata: EntityMetadata[T], row: Any) -> T:
        return metadata.from_dict({name: getattr(row, self.attribute(name)) for name in metadata.fields})


class MappingRegistry:
    """Entity type -> :class:`TableMapping`."""

    def __init__(self) -> None:
        self._mappings: dict[type, TableMapping[Any]] = {}

    def register(
        self,
        entity_type: type[T],
        model: type[Any],
        field_map: Mapping[str, str] | None = None,
    ) -> TableMapping[T]:
        mapping = TableMapping(entity_type=entity_type, model=model, field_map=dict(field_map or {}))
        self._mappings[entity_type] = mapping
        return mapping

    def get(self, entity_type: type[T]) -> TableMapping[T]:
        mapping = self._mappings.get(entity_type)
        if mapping is None:
            raise LookupError(f"No table mapping registered for {entity_type.__name__}")
        return mapping

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._mappings
