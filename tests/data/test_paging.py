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
"""Tests for Sort, Pageable and Page."""

import pytest

from filterdao.data.paging import Order, Page, Pageable, Sort


class TestSort:
    def test_by_is_ascending(self):
        sort = Sort.by("name", "age")
        assert sort.orders == (Order.asc("name"), Order.asc("age"))
        assert not any(order.descending for order in sort.orders)

    def test_and_then(self):
        sort = Sort.by("name").and_then(Sort(orders=(Order.desc("age"),)))
        assert [(o.property, o.direction) for o in sort.orders] == [("name", "asc"), ("age", "desc")]

    def test_truthiness(self):
        assert not Sort.unsorted()
        assert Sort.by("name")


class TestPageable:
    def test_offset_and_limit(self):
        pageable = Pageable.of(3, 10)
        assert pageable.offset == 20
        assert pageable.limit == 10
        assert pageable.is_paged

    def test_unpaged(self):
        pageable = Pageable.unpaged(Sort.by("name"))
        assert pageable.offset == 0
        assert pageable.limit is None
        assert not pageable.is_paged
        assert pageable.sort == Sort.by("name")

    def test_next(self):
        assert Pageable.of(1, 5).next() == Pageable.of(2, 5)

    @pytest.mark.parametrize("page,size", [(0, 10), (1, 0), (-1, 5)])
    def test_rejects_invalid_window(self, page, size):
        with pytest.raises(ValueError):
            Pageable(page=page, size=size)


class TestPage:
    def test_navigation(self):
        page = Page(items=[1, 2], total=5, page=2, size=2)
        assert page.total_pages == 3
        assert page.has_next
        assert page.has_previous

    def test_empty(self):
        page = Page(items=[], total=0, page=1, size=10)
        assert page.total_pages == 0
        assert not page.has_next
        assert not page.has_previous

    def test_map(self):
        page = Page(items=[1, 2], total=2, page=1, size=2).map(str)
        assert page.items == ["1", "2"]
        assert page.total == 2
