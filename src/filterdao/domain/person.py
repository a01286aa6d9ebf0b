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
"""Person entity and its repository."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from filterdao.data.dao import GenericDao
from filterdao.data.entity import entity
from filterdao.data.filter import Filter
from filterdao.data.operator import Operator


def _new_person_id() -> str:
    return str(uuid.uuid4())


@entity(id_factory=_new_person_id)
@dataclass
class Person:
    """A person, identified by an opaque string key."""

    id: str | None = None
    name: str = ""


class PersonDao(GenericDao[str, Person]):
    """Person repository: generic CRUD plus name lookup."""

    async def find_one_by_name(self, name: str) -> Person | None:
        """A person called *name*, or ``None``; any one of several namesakes."""
        return await self.find_one_by_filter({"name": Filter(Operator.EQUAL, name)})
