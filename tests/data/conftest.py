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
"""Shared entity, row model and backend fixtures for the data tests."""

import datetime
import itertools
from dataclasses import dataclass

import pytest
from sqlalchemy import Boolean, Date, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from filterdao.data.dao import GenericDao
from filterdao.data.entity import EntityRegistry
from filterdao.data.memory import InMemoryBackend
from filterdao.data.relational.sqlalchemy import MappingRegistry, SchemaManager, SqlAlchemyBackend


@dataclass
class Item:
    id: int | None = None
    name: str = ""
    price: float = 0.0
    quantity: int = 0
    active: bool = True
    note: str | None = None
    listed: datetime.date | None = None


class RowBase(DeclarativeBase):
    pass


class ItemRow(RowBase):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    price: Mapped[float] = mapped_column(Float)
    quantity: Mapped[int] = mapped_column(Integer)
    active: Mapped[bool] = mapped_column(Boolean)
    note: Mapped[str | None] = mapped_column(String(200), nullable=True)
    listed: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)


class ItemDao(GenericDao[int, Item]):
    pass


_item_ids = itertools.count(1)


@pytest.fixture
def item_cls():
    return Item


@pytest.fixture
def registry():
    registry = EntityRegistry()
    registry.register(Item, id_factory=lambda: next(_item_ids))
    return registry


@pytest.fixture
def item_meta(registry):
    return registry.get(Item)


@pytest.fixture
def mappings():
    mappings = MappingRegistry()
    mappings.register(Item, ItemRow)
    return mappings


@pytest.fixture
async def sqlalchemy_backend(mappings):
    backend = SqlAlchemyBackend.from_url("sqlite+aiosqlite:///:memory:", mappings, poolclass=StaticPool)
    await backend.start()
    await SchemaManager(backend.engine, RowBase.metadata).apply("create")
    yield backend
    await backend.stop()


@pytest.fixture
def memory_backend():
    return InMemoryBackend()


@pytest.fixture(params=["memory", "sqlalchemy"])
async def backend(request, mappings):
    if request.param == "memory":
        yield InMemoryBackend()
        return
    backend = SqlAlchemyBackend.from_url("sqlite+aiosqlite:///:memory:", mappings, poolclass=StaticPool)
    await backend.start()
    await SchemaManager(backend.engine, RowBase.metadata).apply("create")
    yield backend
    await backend.stop()


@pytest.fixture
def dao(backend, registry):
    return ItemDao(backend, registry=registry)


@pytest.fixture
async def stocked_dao(dao):
    await dao.create_all(
        [
            Item(name="apple", price=1.5, quantity=10, active=True, note="red", listed=datetime.date(2024, 3, 1)),
            Item(name="apricot", price=2.5, quantity=0, active=False, note=None),
            Item(name="banana", price=0.5, quantity=25, active=True, note="yellow", listed=datetime.date(2024, 5, 20)),
            Item(name="cherry", price=4.0, quantity=5, active=True, note=None),
        ]
    )
    return dao
