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
"""Explicit schema step, run by the bootstrap layer before any DAO exists.

Modes:

* ``create`` — drop every mapped table, then create them (fresh database)
* ``update`` — create tables that don't exist yet (safe, idempotent)
* ``none`` — skip DDL (externally migrated databases)
"""

from __future__ import annotations

import enum
import logging

from sqlalchemy import MetaData
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from filterdao.data.relational.sqlalchemy.entity import Base
from filterdao.kernel.exceptions import BackendUnavailableError

_logger = logging.getLogger(__name__)


class SchemaMode(enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    NONE = "none"


class SchemaManager:
    """Applies a :class:`SchemaMode` to the tables of a ``MetaData``."""

    def __init__(self, engine: AsyncEngine, metadata: MetaData | None = None) -> None:
        self._engine = engine
        self._metadata = metadata if metadata is not None else Base.metadata

    async def apply(self, mode: SchemaMode | str) -> None:
        mode = SchemaMode(mode)
        if mode is SchemaMode.NONE:
            _logger.info("Schema management disabled (mode=none)")
            return

        _logger.info("Initializing database schema (mode=%s)", mode.value)
        try:
            async with self._engine.begin() as conn:
                if mode is SchemaMode.CREATE:
                    await conn.run_sync(self._metadata.drop_all)
                await conn.run_sync(self._metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            raise BackendUnavailableError(f"Schema initialization failed: {exc}", context={"mode": mode.value}) from exc
        _logger.info("Database schema initialized (%d tables)", len(self._metadata.tables))
