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
"""Field filters and filter maps — the declarative query language of the DAO.

A :class:`Filter` is an operator plus a comparison value. It carries no
field name: filters are attached to fields through a *filter map*, a
mapping of field name to filter that is read as the conjunction (AND) of
its entries. An empty filter map matches every entity.

Example::

    # Explicit filters
    filters = {"name": Filter.eq("Alice"), "age": Filter.ge(18)}
    people = await dao.find_by_filter(filters)

    # From keyword arguments (EQUAL by default)
    filters = FilterUtils.by(name="Alice", active=True)

    # From a partial example object (None fields are skipped)
    filters = FilterUtils.from_example(PersonQuery(name="Alice"))
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from filterdao.data.operator import Operator
from filterdao.kernel.exceptions import InvalidFilterError

_SCALAR_COLLECTIONS = (str, bytes, bytearray)


@dataclasses.dataclass(frozen=True)
class Filter:
    """An immutable predicate: *operator* applied against *value*.

    Construction fails with :class:`InvalidFilterError` when the value
    cannot be used with the operator. ``IN`` values are normalized to a
    tuple.
    """

    operator: Operator
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.operator, Operator):
            raise InvalidFilterError(
                f"Unknown operator {self.operator!r}",
                context={"operator": repr(self.operator)},
            )

        if self.operator.expects_collection:
            if isinstance(self.value, (*_SCALAR_COLLECTIONS, Mapping)) or not isinstance(self.value, Iterable):
                raise InvalidFilterError(
                    f"Operator {self.operator.name} expects a collection of values, got {type(self.value).__name__}",
                    context={"operator": self.operator.name},
                )
            object.__setattr__(self, "value", tuple(self.value))
            return

        if isinstance(self.value, Iterable) and not isinstance(self.value, _SCALAR_COLLECTIONS):
            raise InvalidFilterError(
                f"Operator {self.operator.name} expects a single value, got {type(self.value).__name__}",
                context={"operator": self.operator.name},
            )
        if self.operator.is_textual and not isinstance(self.value, str):
            raise InvalidFilterError(
                f"Operator LIKE expects a string pattern, got {type(self.value).__name__}",
                context={"operator": self.operator.name},
            )
        if self.operator.is_ordering and self.value is None:
            raise InvalidFilterError(
                f"Operator {self.operator.name} cannot compare against None",
                context={"operator": self.operator.name},
            )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def eq(cls, value: Any) -> Filter:
        """Equal to."""
        return cls(Operator.EQUAL, value)

    @classmethod
    def ne(cls, value: Any) -> Filter:
        """Not equal to."""
        return cls(Operator.NOT_EQUAL, value)

    @classmethod
    def gt(cls, value: Any) -> Filter:
        """Greater than."""
        return cls(Operator.GREATER_THAN, value)

    @classmethod
    def ge(cls, value: Any) -> Filter:
        """Greater than or equal."""
        return cls(Operator.GREATER_OR_EQUAL, value)

    @classmethod
    def lt(cls, value: Any) -> Filter:
        """Less than."""
        return cls(Operator.LESS_THAN, value)

    @classmethod
    def le(cls, value: Any) -> Filter:
        """Less than or equal."""
        return cls(Operator.LESS_OR_EQUAL, value)

    @classmethod
    def like(cls, pattern: str) -> Filter:
        """SQL LIKE pattern match (``%`` any run of characters, ``_`` exactly one)."""
        return cls(Operator.LIKE, pattern)

    @classmethod
    def in_(cls, values: Iterable[Any]) -> Filter:
        """Value is one of *values*."""
        return cls(Operator.IN, values)


FilterMap = Mapping[str, Filter]
"""Field name to filter; entries are ANDed together."""


class FilterUtils:
    """Build filter maps from keyword arguments, dicts, or example objects.

    Every generated filter uses :attr:`Operator.EQUAL`.
    """

    @staticmethod
    def by(**kwargs: Any) -> dict[str, Filter]:
        """Create a filter map from keyword arguments."""
        return {field: Filter.eq(value) for field, value in kwargs.items()}

    @staticmethod
    def from_dict(values: Mapping[str, Any]) -> dict[str, Filter]:
        """Create a filter map from field->value pairs. ``None`` values are skipped."""
        return {field: Filter.eq(value) for field, value in values.items() if value is not None}

    @staticmethod
    def from_example(example: Any) -> dict[str, Filter]:
        """Create a filter map from an example entity or DTO.

        Extracts non-``None`` field values. Supports dataclasses and any
        object with ``__dict__``.
        """
        if dataclasses.is_dataclass(example) and not isinstance(example, type):
            fields = {f.name: getattr(example, f.name) for f in dataclasses.fields(example)}
        else:
            fields = vars(example)
        return FilterUtils.from_dict(fields)
