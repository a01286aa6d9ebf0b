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
"""Query translator port — filter map to backend-native predicate.

Every backend ships a :class:`QueryTranslator` subclass that supplies an
operator mapping table plus three hooks (field reference, conjunction,
match-all). The shared :meth:`QueryTranslator.translate` algorithm
validates each ``(field, filter)`` pair against the entity metadata, emits
one clause per pair from the table, and ANDs the clauses together.

Type Parameters:
    Q: The backend predicate representation (e.g. a SQLAlchemy clause, a
       Python callable).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from filterdao.data.entity import EntityMetadata, FieldInfo
from filterdao.data.filter import Filter, FilterMap
from filterdao.data.operator import Operator
from filterdao.data.paging import Sort
from filterdao.kernel.exceptions import InvalidFilterError, UnsupportedOperatorError

Q = TypeVar("Q")

ClauseBuilder = Callable[[Any, Any], Any]
"""``(field_reference, filter_value) -> clause``."""


class QueryTranslator(ABC, Generic[Q]):
    """Deterministic translation of filter maps into backend predicates."""

    #: Human-readable backend name used in error messages.
    backend_name: str = "backend"

    @property
    @abstractmethod
    def operators(self) -> Mapping[Operator, ClauseBuilder]:
        """The operator mapping table. Missing operators are unsupported."""

    @abstractmethod
    def field_reference(self, metadata: EntityMetadata[Any], field: FieldInfo) -> Any:
        """Backend handle for *field* (column, accessor, ...)."""

    @abstractmethod
    def conjunction(self, metadata: EntityMetadata[Any], clauses: list[Any]) -> Q:
        """AND-combine one or more clauses."""

    @abstractmethod
    def match_all(self, metadata: EntityMetadata[Any]) -> Q:
        """Predicate selecting every entity."""

    def supports(self, operator: Operator) -> bool:
        return operator in self.operators

    def translate(self, metadata: EntityMetadata[Any], filter_map: FilterMap) -> Q:
        """Translate *filter_map* for *metadata*'s entity type.

        Fields are processed in sorted order, so equal filter maps yield
        identical predicates.

        Raises:
            InvalidFilterError: unknown field, or operator/value not
                compatible with the field's declared type.
            UnsupportedOperatorError: the backend has no mapping for an
                operator in the map.
        """
        if not filter_map:
            return self.match_all(metadata)

        clauses: list[Any] = []
        table = self.operators
        for name in sorted(filter_map):
            flt = filter_map[name]
            info = self.validate(metadata, name, flt)
            builder = table[flt.operator]
            clauses.append(builder(self.field_reference(metadata, info), flt.value))
        return self.conjunction(metadata, clauses)

    def validate(self, metadata: EntityMetadata[Any], name: str, flt: Filter) -> FieldInfo:
        """Check one filter against the entity metadata and this backend."""
        if not isinstance(flt, Filter):
            raise InvalidFilterError(
                f"Filter for '{name}' must be a Filter, got {type(flt).__name__}",
                context={"entity": metadata.name, "field": name},
            )
        info = metadata.field(name)
        operator = flt.operator

        if not self.supports(operator):
            raise UnsupportedOperatorError(
                f"The {self.backend_name} backend cannot express {operator.name}",
                context={"entity": metadata.name, "field": name, "operator": operator.name},
            )

        context = {"entity": metadata.name, "field": name, "operator": operator.name}
        if operator.is_textual and not info.is_textual:
            raise InvalidFilterError(f"{operator.name} requires a textual field, '{name}' is not", context=context)
        if operator.is_ordering and not info.is_orderable:
            raise InvalidFilterError(f"{operator.name} requires an orderable field, '{name}' is not", context=context)

        values = flt.value if operator.expects_collection else (flt.value,)
        for value in values:
            if not info.accepts(value):
                raise InvalidFilterError(
                    f"Value {value!r} is not compatible with field '{name}'",
                    context={**context, "value": repr(value)},
                )
        return info

    @staticmethod
    def validate_sort(metadata: EntityMetadata[Any], sort: Sort) -> list[tuple[FieldInfo, bool]]:
        """Resolve sort orders to ``(field, descending)`` pairs.

        Raises:
            InvalidFilterError: unknown field, or a field whose values have
                no order (booleans sort false before true).
        """
        resolved: list[tuple[FieldInfo, bool]] = []
        for order in sort.orders:
            info = metadata.field(order.property)
            if not (info.is_orderable or info.is_boolean):
                raise InvalidFilterError(
                    f"Cannot sort by '{info.name}', its values have no order",
                    context={"entity": metadata.name, "field": info.name},
                )
            resolved.append((info, order.descending))
        return resolved
