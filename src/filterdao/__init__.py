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
"""filterdao — a generic, filterable DAO layer with pluggable storage backends."""

from filterdao.data import (
    EntityMetadata,
    EntityRegistry,
    Filter,
    FilterMap,
    FilterUtils,
    GenericDao,
    InMemoryBackend,
    KeyValueBackend,
    Operator,
    Order,
    Page,
    Pageable,
    Sort,
    StorageBackend,
    default_registry,
    entity,
)
from filterdao.kernel.exceptions import (
    BackendUnavailableError,
    DaoException,
    InvalidFilterError,
    NotFoundError,
    PersistenceError,
    UnsupportedOperatorError,
)

__version__ = "0.1.0"

__all__ = [
    "BackendUnavailableError",
    "DaoException",
    "EntityMetadata",
    "EntityRegistry",
    "Filter",
    "FilterMap",
    "FilterUtils",
    "GenericDao",
    "InMemoryBackend",
    "InvalidFilterError",
    "KeyValueBackend",
    "NotFoundError",
    "Operator",
    "Order",
    "Page",
    "Pageable",
    "PersistenceError",
    "Sort",
    "StorageBackend",
    "UnsupportedOperatorError",
    "default_registry",
    "entity",
]
