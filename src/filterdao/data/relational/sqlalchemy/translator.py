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
"""SQLAlchemy translator — filter maps become WHERE clause elements."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from sqlalchemy import ColumnElement, and_, true

from filterdao.data.entity import EntityMetadata, FieldInfo
from filterdao.data.operator import Operator
from filterdao.data.relational.sqlalchemy.entity import MappingRegistry
from filterdao.data.translator import ClauseBuilder, QueryTranslator


def _equal(col: Any, value: Any) -> ColumnElement[bool]:
    return col.is_(None) if value is None else col == value


def _not_equal(col: Any, value: Any) -> ColumnElement[bool]:
    return col.isnot(None) if value is None else col != value


_SQL_OPERATORS: Mapping[Operator, ClauseBuilder] = MappingProxyType(
    {
        Operator.EQUAL: _equal,
        Operator.NOT_EQUAL: _not_equal,
        Operator.GREATER_THAN: lambda col, value: col > value,
        Operator.GREATER_OR_EQUAL: lambda col, value: col >= value,
        Operator.LESS_THAN: lambda col, value: col < value,
        Operator.LESS_OR_EQUAL: lambda col, value: col <= value,
        Operator.LIKE: lambda col, pattern: col.like(pattern),
        Operator.IN: lambda col, values: col.in_(values),
    }
)


class SqlAlchemyTranslator(QueryTranslator[ColumnElement[bool]]):
    """Translate filter maps into a single SQLAlchemy boolean clause.

    ``LIKE`` keeps the database's own case rules (SQLite compares ASCII
    case-insensitively, most servers do not).
    """

    backend_name = "sqlalchemy"

    def __init__(self, mappings: MappingRegistry) -> None:
        self._mappings = mappings

    @property
    def operators(self) -> Mapping[Operator, ClauseBuilder]:
        return _SQL_OPERATORS

    def field_reference(self, metadata: EntityMetadata[Any], field: FieldInfo) -> Any:
        return self._mappings.get(metadata.entity_type).column(field.name)

    def conjunction(self, metadata: EntityMetadata[Any], clauses: list[Any]) -> ColumnElement[bool]:
        if len(clauses) == 1:
            return clauses[0]
        return and_(*clauses)

    def match_all(self, metadata: EntityMetadata[Any]) -> ColumnElement[bool]:
        return true()
