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
"""Bootstrap — explicit construction of the persistence layer.

Startup sequence:
1. Load configuration (packaged defaults, project files, profile overlays)
2. Configure logging (from the ``filterdao.logging`` section)
3. Build the storage backend from ``filterdao.datasource``
4. Start the backend (connectivity check)
5. Run the schema step from ``filterdao.schema`` (relational backend only)
6. Construct the repositories, handing each the backend

Profiles pick the database and schema mode: ``test`` uses
``filterdao-test`` and recreates the tables, ``import`` recreates the
tables of the main database, ``production`` (and no profile) only creates
missing tables.
"""

from __future__ import annotations

import time
from pathlib import Path
from types import TracebackType
from typing import Any, Literal

from pydantic import BaseModel, Field
from sqlalchemy.engine import URL, make_url

from filterdao.core.config import Config, config_properties
from filterdao.data.memory import InMemoryBackend, KeyValueBackend
from filterdao.data.ports.outbound import StorageBackend
from filterdao.data.relational.sqlalchemy import MappingRegistry, SchemaManager, SchemaMode, SqlAlchemyBackend
from filterdao.domain.person import PersonDao
from filterdao.logging.structlog_adapter import StructlogAdapter
from filterdao.persistence.tables import register_tables


@config_properties(prefix="filterdao.datasource")
class DataSourceProperties(BaseModel):
    """Connection settings for the storage backend."""

    backend: Literal["sqlalchemy", "memory", "keyvalue"] = "sqlalchemy"
    url: str = "sqlite+aiosqlite:///{database}.db"
    database: str = Field(default="filterdao", min_length=1)
    username: str = ""
    password: str = ""
    show_sql: bool = False

    def resolved_url(self) -> URL:
        """The URL template with ``{database}`` and credentials filled in."""
        url = make_url(self.url.format(database=self.database))
        if self.username:
            url = url.set(username=self.username, password=self.password or None)
        return url


@config_properties(prefix="filterdao.schema")
class SchemaProperties(BaseModel):
    """Schema step settings."""

    mode: SchemaMode = SchemaMode.UPDATE


def create_backend(config: Config, mappings: MappingRegistry | None = None) -> StorageBackend:
    """Build (but do not start) the backend selected by configuration."""
    datasource = config.bind(DataSourceProperties)
    if datasource.backend == "memory":
        return InMemoryBackend()
    if datasource.backend == "keyvalue":
        return KeyValueBackend()
    mappings = register_tables(mappings if mappings is not None else MappingRegistry())
    return SqlAlchemyBackend.from_url(datasource.resolved_url(), mappings, echo=datasource.show_sql)


class PersistenceContext:
    """The started backend plus the repositories built on it.

    Usable as an async context manager; leaving it stops the backend.
    """

    def __init__(self, config: Config, backend: StorageBackend) -> None:
        self.config = config
        self.backend = backend
        self.person_dao = PersonDao(backend)

    async def close(self) -> None:
        await self.backend.stop()

    async def __aenter__(self) -> PersistenceContext:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def bootstrap(
    config: Config | None = None,
    *,
    base_dir: str | Path | None = None,
    backend: StorageBackend | None = None,
    configure_logging: bool = True,
) -> PersistenceContext:
    """Build, start and migrate the persistence layer.

    Args:
        config: Ready configuration; loaded from *base_dir* (default: the
            working directory) when omitted.
        base_dir: Directory searched for ``filterdao.yaml`` files.
        backend: Pre-built backend, bypassing ``filterdao.datasource``.
        configure_logging: Whether to (re)configure structlog.
    """
    start = time.perf_counter()
    if config is None:
        config = Config.from_sources(Path(base_dir) if base_dir is not None else Path("."))

    adapter = StructlogAdapter()
    if configure_logging:
        adapter.configure(config)
    log: Any = adapter.get_logger("filterdao.bootstrap")

    profiles = config.active_profiles
    if profiles:
        log.info("active_profiles", profiles=",".join(profiles))
    else:
        log.info("no_active_profiles")

    if backend is None:
        backend = create_backend(config)
    await backend.start()

    if isinstance(backend, SqlAlchemyBackend):
        try:
            schema = config.bind(SchemaProperties)
            await SchemaManager(backend.engine).apply(schema.mode)
        except Exception:
            await backend.stop()
            raise

    context = PersistenceContext(config, backend)
    log.info(
        "persistence_ready",
        backend=backend.translator.backend_name,
        elapsed=f"{time.perf_counter() - start:.3f}s",
    )
    return context
