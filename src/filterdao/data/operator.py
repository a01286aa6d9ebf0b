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
"""Comparison operators understood by every query translator.

Operators carry no behaviour of their own. Each translator owns a mapping
table from :class:`Operator` to its native clause builder, so adding an
operator means extending this enum and those tables.
"""

from __future__ import annotations

import enum


class Operator(enum.Enum):
    """Comparison semantics of a single field filter."""

    EQUAL = "eq"
    NOT_EQUAL = "neq"
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_OR_EQUAL = "lte"
    LIKE = "like"
    IN = "in"

    @property
    def is_ordering(self) -> bool:
        """Whether the operator needs an orderable field."""
        return self in _ORDERING

    @property
    def is_textual(self) -> bool:
        """Whether the operator needs a textual field."""
        return self is Operator.LIKE

    @property
    def expects_collection(self) -> bool:
        """Whether the operator compares against a collection of values."""
        return self is Operator.IN


_ORDERING = frozenset(
    {
        Operator.GREATER_THAN,
        Operator.GREATER_OR_EQUAL,
        Operator.LESS_THAN,
        Operator.LESS_OR_EQUAL,
    }
)
