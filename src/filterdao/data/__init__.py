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
"""filterdao data — generic DAO, filter language and storage backends.

The core is backend-agnostic: :class:`GenericDao` validates and translates
filter maps through the backend's :class:`QueryTranslator` and runs them
through :class:`StorageBackend` sessions.

Backends:
    - **In-memory** (``filterdao.data.memory``) — every operator, dict storage.
    - **Key-value** (``filterdao.data.memory``) — equality and membership only.
    - **Relational** (``filterdao.data.relational.sqlalchemy``) — SQLAlchemy async ORM.
"""

from filterdao.data.dao import GenericDao
from filterdao.data.entity import EntityMetadata, EntityRegistry, FieldInfo, default_registry, entity
from filterdao.data.filter import Filter, FilterMap, FilterUtils
from filterdao.data.memory import InMemoryBackend, KeyValueBackend
from filterdao.data.operator import Operator
from filterdao.data.paging import Order, Page, Pageable, Sort
from filterdao.data.ports.outbound import StorageBackend, StorageSession
from filterdao.data.translator import QueryTranslator

__all__ = [
    "EntityMetadata",
    "EntityRegistry",
    "FieldInfo",
    "Filter",
    "FilterMap",
    "FilterUtils",
    "GenericDao",
    "InMemoryBackend",
    "KeyValueBackend",
    "Operator",
    "Order",
    "Page",
    "Pageable",
    "QueryTranslator",
    "Sort",
    "StorageBackend",
    "StorageSession",
    "default_registry",
    "entity",
]
