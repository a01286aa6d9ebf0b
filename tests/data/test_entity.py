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
"""Tests for entity metadata and the entity registry."""

import datetime
import enum
from dataclasses import dataclass, field

import pytest

from filterdao.data.entity import EntityMetadata, EntityRegistry, FieldInfo, entity
from filterdao.kernel.exceptions import InvalidFilterError


class Colour(enum.Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Gadget:
    code: str = ""
    weight: float | None = None
    count: int = 0
    enabled: bool = False
    colour: Colour = Colour.RED
    released: datetime.date | None = None
    tags: list[str] = field(default_factory=list)


class TestFieldInfo:
    def test_metadata_from_dataclass(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        assert meta.name == "Gadget"
        assert meta.id_field == "code"
        assert list(meta.fields) == ["code", "weight", "count", "enabled", "colour", "released", "tags"]
        assert meta.fields["weight"] == FieldInfo(name="weight", type=float, nullable=True)
        assert meta.fields["count"].nullable is False

    def test_textual_and_orderable(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        assert meta.fields["code"].is_textual
        assert not meta.fields["count"].is_textual
        assert meta.fields["count"].is_orderable
        assert meta.fields["released"].is_orderable
        assert not meta.fields["enabled"].is_orderable
        assert not meta.fields["colour"].is_orderable

    def test_accepts(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        assert meta.fields["weight"].accepts(1)
        assert meta.fields["weight"].accepts(None)
        assert not meta.fields["count"].accepts(None)
        assert not meta.fields["count"].accepts(True)
        assert not meta.fields["count"].accepts("1")
        assert meta.fields["enabled"].accepts(False)
        assert not meta.fields["enabled"].accepts(0)
        assert meta.fields["colour"].accepts(Colour.BLUE)
        assert not meta.fields["colour"].accepts("blue")
        assert meta.fields["released"].accepts(datetime.date(2024, 1, 1))
        assert not meta.fields["released"].accepts(datetime.datetime(2024, 1, 1, 12, 0))

    def test_unknown_field(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        with pytest.raises(InvalidFilterError) as exc_info:
            meta.field("size")
        assert exc_info.value.context == {"entity": "Gadget", "field": "size"}


class TestEntityMetadata:
    def test_requires_dataclass(self):
        class NotADataclass:
            id: int = 0

        with pytest.raises(TypeError):
            EntityMetadata.from_dataclass(NotADataclass)

    def test_requires_id_field(self):
        with pytest.raises(TypeError, match="no identifier field 'id'"):
            EntityMetadata.from_dataclass(Gadget)

    def test_id_access_and_copy(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        gadget = Gadget(code="g-1", tags=["a"])
        assert meta.get_id(gadget) == "g-1"

        meta.set_id(gadget, "g-2")
        copy = meta.copy(gadget)
        assert copy == gadget
        assert copy is not gadget
        assert copy.code == "g-2"

    def test_from_dict_keeps_defaults_and_ignores_unknown(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code")
        gadget = meta.from_dict({"code": "g-1", "bogus": 1})
        assert gadget == Gadget(code="g-1")

    def test_custom_factory(self):
        meta = EntityMetadata.from_dataclass(Gadget, id_field="code", factory=lambda: Gadget(count=5))
        assert meta.factory().count == 5


class TestEntityRegistry:
    def test_register_and_get(self):
        registry = EntityRegistry()
        meta = registry.register(Gadget, id_field="code")
        assert registry.get(Gadget) is meta
        assert Gadget in registry
        assert len(registry) == 1
        assert list(registry) == [meta]

    def test_get_unregistered(self):
        with pytest.raises(LookupError):
            EntityRegistry().get(Gadget)

    def test_decorator_uses_given_registry(self):
        registry = EntityRegistry()

        @entity(id_field="key", id_factory=lambda: "k-1", registry=registry)
        @dataclass
        class Token:
            key: str | None = None

        meta = registry.get(Token)
        assert meta.id_field == "key"
        assert meta.id_factory() == "k-1"
