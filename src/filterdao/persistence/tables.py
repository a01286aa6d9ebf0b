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
"""Row models for the domain entities and their registration."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from filterdao.data.relational.sqlalchemy.entity import Base, MappingRegistry
from filterdao.domain.person import Person


class PersonRow(Base):
    __tablename__ = "person"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)


def register_tables(mappings: MappingRegistry) -> MappingRegistry:
    """Register every domain entity's row model in *mappings*."""
    mappings.register(Person, PersonRow)
    return mappings
