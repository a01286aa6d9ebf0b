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
"""In-process translators: filter maps become Python predicates.

Comparisons follow SQL ``NULL`` semantics so that the in-memory and
relational backends agree: a stored ``None`` never satisfies a comparison,
except ``EQUAL None`` (is null) and ``NOT_EQUAL None`` (is not null).
"""

from __future__ import annotations

import operator as op
import re
from collections.abc import Callable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from filterdao.data.entity import EntityMetadata, FieldInfo
from filterdao.data.operator import Operator
from filterdao.data.translator import ClauseBuilder, QueryTranslator

Predicate = Callable[[Any], bool]


@lru_cache(maxsize=256)
def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a SQL LIKE pattern (``%``, ``_``) into an anchored regex."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _compare(fn: Callable[[Any, Any], bool]) -> ClauseBuilder:
    def build(name: str, value: Any) -> Predicate:
        def predicate(entity: Any) -> bool:
            current = getattr(entity, name)
            return current is not None and fn(current, value)

        return predicate

    return build


def _equal(name: str, value: Any) -> Predicate:
    if value is None:
        return lambda entity: getattr(entity, name) is None
    return _compare(op.eq)(name, value)


def _not_equal(name: str, value: Any) -> Predicate:
    if value is None:
        return lambda entity: getattr(entity, name) is not None
    return _compare(op.ne)(name, value)


def _like(name: str, pattern: str) -> Predicate:
    regex = like_to_regex(pattern)
    return _compare(lambda current, _: regex.fullmatch(current) is not None)(name, pattern)


def _in(name: str, values: tuple[Any, ...]) -> Predicate:
    candidates = [v for v in values if v is not None]
    return _compare(lambda current, _: current in candidates)(name, values)


_MEMORY_OPERATORS: Mapping[Operator, ClauseBuilder] = MappingProxyType(
    {
        Operator.EQUAL: _equal,
        Operator.NOT_EQUAL: _not_equal,
        Operator.GREATER_THAN: _compare(op.gt),
        Operator.GREATER_OR_EQUAL: _compare(op.ge),
        Operator.LESS_THAN: _compare(op.lt),
        Operator.LESS_OR_EQUAL: _compare(op.le),
        Operator.LIKE: _like,
        Operator.IN: _in,
    }
)


class MemoryTranslator(QueryTranslator[Predicate]):
    """Translate filter maps into ``entity -> bool`` callables."""

    backend_name = "in-memory"

    @property
    def operators(self) -> Mapping[Operator, ClauseBuilder]:
        return _MEMORY_OPERATORS

    def field_reference(self, metadata: EntityMetadata[Any], field: FieldInfo) -> str:
        return field.name

    def conjunction(self, metadata: EntityMetadata[Any], clauses: list[Any]) -> Predicate:
        predicates: list[Predicate] = list(clauses)
        return lambda entity: all(p(entity) for p in predicates)

    def match_all(self, metadata: EntityMetadata[Any]) -> Predicate:
        return lambda entity: True


class KeyValueTranslator(MemoryTranslator):
    """A hash store can only test identity: equality and membership."""

    backend_name = "key-value"

    _SUPPORTED = frozenset({Operator.EQUAL, Operator.NOT_EQUAL, Operator.IN})

    @property
    def operators(self) -> Mapping[Operator, ClauseBuilder]:
        return MappingProxyType({k: v for k, v in _MEMORY_OPERATORS.items() if k in self._SUPPORTED})
