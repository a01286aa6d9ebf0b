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
"""Entity metadata and the entity class registry.

Entities are plain dataclasses. :class:`EntityMetadata` describes one of
them to the rest of the library (identifier field, declared fields with
their types, instance factory), and :class:`EntityRegistry` hands that
description to DAOs and translators.

Usage::

    @entity(id_factory=lambda: str(uuid.uuid4()))
    @dataclass
    class Person:
        id: str | None = None
        name: str = ""

    meta = default_registry.get(Person)
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import types
import uuid
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar, Union, get_args, get_origin, get_type_hints

from filterdao.kernel.exceptions import InvalidFilterError

T = TypeVar("T")

_NUMERIC = (int, float, decimal.Decimal)
_ORDERABLE: tuple[type, ...] = (
    int,
    float,
    decimal.Decimal,
    str,
    datetime.date,
    datetime.datetime,
    datetime.time,
    datetime.timedelta,
)
_KNOWN_SCALARS: tuple[type, ...] = (*_ORDERABLE, bool, bytes, uuid.UUID)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return ``(inner_type, nullable)`` for ``X | None`` / ``Optional[X]``."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        return Any, nullable
    return annotation, annotation is type(None)


@dataclasses.dataclass(frozen=True)
class FieldInfo:
    """A declared entity field and its comparison-relevant type."""

    name: str
    type: Any
    nullable: bool = False

    @property
    def is_textual(self) -> bool:
        return isinstance(self.type, type) and issubclass(self.type, str)

    @property
    def is_boolean(self) -> bool:
        return isinstance(self.type, type) and issubclass(self.type, bool)

    @property
    def is_orderable(self) -> bool:
        if not isinstance(self.type, type) or issubclass(self.type, bool):
            return False
        return issubclass(self.type, _ORDERABLE)

    def accepts(self, value: Any) -> bool:
        """Whether *value* can be compared against this field."""
        if value is None:
            return self.nullable
        field_type = self.type
        if not isinstance(field_type, type):
            return True
        if issubclass(field_type, bool):
            return isinstance(value, bool)
        if issubclass(field_type, _NUMERIC) and not issubclass(field_type, enum.Enum):
            return isinstance(value, _NUMERIC) and not isinstance(value, bool)
        if issubclass(field_type, datetime.date) and not issubclass(field_type, datetime.datetime):
            # datetime subclasses date but the two do not compare
            return isinstance(value, datetime.date) and not isinstance(value, datetime.datetime)
        if issubclass(field_type, enum.Enum) or issubclass(field_type, _KNOWN_SCALARS):
            return isinstance(value, field_type)
        return True


@dataclasses.dataclass(frozen=True)
class EntityMetadata(Generic[T]):
    """Everything the DAO layer needs to know about one entity type.

    Attributes:
        entity_type: The entity class.
        id_field: Name of the identifier field.
        fields: Declared fields keyed by name.
        factory: Builds a fresh, default-initialized instance.
        id_factory: Generates an identifier for new entities that have none.
    """

    entity_type: type[T]
    id_field: str
    fields: Mapping[str, FieldInfo]
    factory: Callable[[], T]
    id_factory: Callable[[], Any] | None = None

    @property
    def name(self) -> str:
        return self.entity_type.__name__

    @classmethod
    def from_dataclass(
        cls,
        entity_type: type[T],
        *,
        id_field: str = "id",
        factory: Callable[[], T] | None = None,
        id_factory: Callable[[], Any] | None = None,
    ) -> EntityMetadata[T]:
        """Derive metadata from a dataclass's fields and type hints."""
        if not (dataclasses.is_dataclass(entity_type) and isinstance(entity_type, type)):
            raise TypeError(f"{entity_type!r} is not a dataclass type")

        hints = get_type_hints(entity_type)
        fields: dict[str, FieldInfo] = {}
        for f in dataclasses.fields(entity_type):
            inner, nullable = _unwrap_optional(hints.get(f.name, Any))
            fields[f.name] = FieldInfo(name=f.name, type=inner, nullable=nullable)

        if id_field not in fields:
            raise TypeError(f"{entity_type.__name__} has no identifier field '{id_field}'")

        return cls(
            entity_type=entity_type,
            id_field=id_field,
            fields=types.MappingProxyType(fields),
            factory=factory or entity_type,
            id_factory=id_factory,
        )

    def field(self, name: str) -> FieldInfo:
        """Look up a declared field, failing with InvalidFilterError if unknown."""
        info = self.fields.get(name)
        if info is None:
            raise InvalidFilterError(
                f"{self.name} has no field '{name}'",
                context={"entity": self.name, "field": name},
            )
        return info

    def get_id(self, entity: T) -> Any:
        return getattr(entity, self.id_field)

    def set_id(self, entity: T, value: Any) -> None:
        setattr(entity, self.id_field, value)

    def to_dict(self, entity: T) -> dict[str, Any]:
        """Extract declared field values."""
        return {name: getattr(entity, name) for name in self.fields}

    def from_dict(self, values: Mapping[str, Any]) -> T:
        """Build an entity from field values; missing fields keep factory defaults."""
        entity = self.factory()
        for name, value in values.items():
            if name in self.fields:
                setattr(entity, name, value)
        return entity

    def copy(self, entity: T) -> T:
        """Detached copy, so stored state and caller-owned instances never alias."""
        return self.from_dict(self.to_dict(entity))


class EntityRegistry:
    """Maps entity classes to their :class:`EntityMetadata`."""

    def __init__(self) -> None:
        self._entries: dict[type, EntityMetadata[Any]] = {}

    def register(
        self,
        entity_type: type[T],
        *,
        id_field: str = "id",
        factory: Callable[[], T] | None = None,
        id_factory: Callable[[], Any] | None = None,
    ) -> EntityMetadata[T]:
        """Register a dataclass entity (re-registration replaces the entry)."""
        meta = EntityMetadata.from_dataclass(entity_type, id_field=id_field, factory=factory, id_factory=id_factory)
        self._entries[entity_type] = meta
        return meta

    def get(self, entity_type: type[T]) -> EntityMetadata[T]:
        meta = self._entries.get(entity_type)
        if meta is None:
            raise LookupError(f"{entity_type.__name__} is not a registered entity")
        return meta

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._entries

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


default_registry = EntityRegistry()


def entity(
    *,
    id_field: str = "id",
    factory: Callable[[], Any] | None = None,
    id_factory: Callable[[], Any] | None = None,
    registry: EntityRegistry | None = None,
) -> Callable[[type[T]], type[T]]:
    """Register a dataclass in *registry* (the default registry when omitted)."""

    def decorator(cls: type[T]) -> type[T]:
        target = registry if registry is not None else default_registry
        target.register(cls, id_field=id_field, factory=factory, id_factory=id_factory)
        return cls

    return decorator
