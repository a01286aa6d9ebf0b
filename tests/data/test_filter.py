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
"""Tests for Operator, Filter and FilterUtils."""

from dataclasses import dataclass

import pytest

from filterdao.data.filter import Filter, FilterUtils
from filterdao.data.operator import Operator
from filterdao.kernel.exceptions import InvalidFilterError


class TestOperator:
    def test_members(self):
        assert [op.name for op in Operator] == [
            "EQUAL",
            "NOT_EQUAL",
            "GREATER_THAN",
            "GREATER_OR_EQUAL",
            "LESS_THAN",
            "LESS_OR_EQUAL",
            "LIKE",
            "IN",
        ]

    def test_lookup_by_value(self):
        assert Operator("gte") is Operator.GREATER_OR_EQUAL

    def test_classification(self):
        assert Operator.LESS_THAN.is_ordering
        assert not Operator.EQUAL.is_ordering
        assert Operator.LIKE.is_textual
        assert Operator.IN.expects_collection
        assert not Operator.NOT_EQUAL.expects_collection


class TestFilter:
    def test_factories(self):
        assert Filter.eq(1) == Filter(Operator.EQUAL, 1)
        assert Filter.ne(1).operator is Operator.NOT_EQUAL
        assert Filter.gt(1).operator is Operator.GREATER_THAN
        assert Filter.ge(1).operator is Operator.GREATER_OR_EQUAL
        assert Filter.lt(1).operator is Operator.LESS_THAN
        assert Filter.le(1).operator is Operator.LESS_OR_EQUAL
        assert Filter.like("a%").operator is Operator.LIKE

    def test_is_immutable(self):
        flt = Filter.eq("Alice")
        with pytest.raises(AttributeError):
            flt.value = "Bob"  # type: ignore[misc]

    def test_hashable_and_comparable(self):
        assert Filter.eq("Alice") == Filter.eq("Alice")
        assert len({Filter.eq("Alice"), Filter.eq("Alice"), Filter.ne("Alice")}) == 2

    def test_in_normalizes_to_tuple(self):
        assert Filter.in_(["a", "b"]).value == ("a", "b")
        assert Filter.in_(x for x in (1, 2)).value == (1, 2)
        assert Filter.in_({3}).value == (3,)

    def test_empty_in_is_allowed(self):
        assert Filter.in_([]).value == ()

    @pytest.mark.parametrize("value", ["abc", b"abc", {"a": 1}, 42])
    def test_in_rejects_non_collections(self, value):
        with pytest.raises(InvalidFilterError) as exc_info:
            Filter(Operator.IN, value)
        assert exc_info.value.context["operator"] == "IN"

    def test_scalar_operator_rejects_collection(self):
        with pytest.raises(InvalidFilterError):
            Filter.eq(["Alice", "Bob"])

    def test_like_requires_string(self):
        with pytest.raises(InvalidFilterError):
            Filter(Operator.LIKE, 42)

    def test_ordering_rejects_none(self):
        with pytest.raises(InvalidFilterError):
            Filter.gt(None)

    def test_equal_none_is_allowed(self):
        assert Filter.eq(None).value is None
        assert Filter.ne(None).value is None

    def test_unknown_operator(self):
        with pytest.raises(InvalidFilterError):
            Filter("eq", 1)  # type: ignore[arg-type]


@dataclass
class PersonQuery:
    name: str | None = None
    age: int | None = None


class TestFilterUtils:
    def test_by_keywords(self):
        assert FilterUtils.by(name="Alice", age=30) == {"name": Filter.eq("Alice"), "age": Filter.eq(30)}

    def test_by_keeps_none(self):
        assert FilterUtils.by(note=None) == {"note": Filter.eq(None)}

    def test_from_dict_skips_none(self):
        assert FilterUtils.from_dict({"name": "Alice", "age": None}) == {"name": Filter.eq("Alice")}

    def test_from_example_dataclass(self):
        assert FilterUtils.from_example(PersonQuery(age=30)) == {"age": Filter.eq(30)}

    def test_from_example_plain_object(self):
        class Probe:
            def __init__(self):
                self.name = "Bob"
                self.age = None

        assert FilterUtils.from_example(Probe()) == {"name": Filter.eq("Bob")}
