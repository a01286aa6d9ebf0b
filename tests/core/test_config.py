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
"""Tests for configuration loading, profiles and binding."""

from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel

from filterdao.core.bootstrap import DataSourceProperties, SchemaProperties
from filterdao.core.config import Config, config_properties
from filterdao.data.relational.sqlalchemy import SchemaMode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("FILTERDAO_PROFILES_ACTIVE", raising=False)
    monkeypatch.delenv("FILTERDAO_DATASOURCE_DATABASE", raising=False)


class TestConfig:
    def test_get_nested_value(self):
        config = Config({"filterdao": {"datasource": {"database": "people"}}})
        assert config.get("filterdao.datasource.database") == "people"

    def test_get_with_default(self):
        assert Config({}).get("filterdao.missing.key", "fallback") == "fallback"

    def test_env_var_overrides_value(self, monkeypatch):
        monkeypatch.setenv("FILTERDAO_DATASOURCE_DATABASE", "from-env")
        config = Config({"filterdao": {"datasource": {"database": "people"}}})
        assert config.get("filterdao.datasource.database") == "from-env"
        assert config.get_section("filterdao.datasource") == {"database": "from-env"}

    def test_placeholders(self, monkeypatch):
        monkeypatch.setenv("PEOPLE_DB", "people")
        config = Config(
            {
                "filterdao": {
                    "datasource": {
                        "database": "${PEOPLE_DB}",
                        "url": "sqlite+aiosqlite:///${filterdao.datasource.database}.db",
                    },
                    "schema": {"mode": "${SCHEMA_MODE_UNSET:update}"},
                }
            }
        )
        assert config.get("filterdao.datasource.database") == "people"
        assert config.get("filterdao.datasource.url") == "sqlite+aiosqlite:///people.db"
        assert config.get("filterdao.schema.mode") == "update"

    def test_unresolvable_placeholder(self):
        config = Config({"filterdao": {"datasource": {"database": "${NO_SUCH_VARIABLE_ANYWHERE}"}}})
        with pytest.raises(ValueError, match="Cannot resolve placeholder"):
            config.get("filterdao.datasource.database")


class TestConfigSources:
    def test_packaged_defaults(self):
        config = Config.from_sources(active_profiles=[])
        assert config.get("filterdao.datasource.database") == "filterdao"
        assert config.get("filterdao.schema.mode") == "update"
        assert config.active_profiles == []
        assert config.loaded_sources == ["filterdao-defaults.yaml (packaged defaults)"]

    def test_test_profile_defaults(self):
        config = Config.from_sources(active_profiles=["test"])
        assert config.get("filterdao.datasource.database") == "filterdao-test"
        assert config.get("filterdao.schema.mode") == "create"
        assert config.active_profiles == ["test"]

    def test_import_profile_recreates_main_database(self):
        config = Config.from_sources(active_profiles=["import"])
        assert config.get("filterdao.datasource.database") == "filterdao"
        assert config.get("filterdao.schema.mode") == "create"

    def test_production_profile(self):
        config = Config.from_sources(active_profiles=["production"])
        assert config.get("filterdao.schema.mode") == "update"

    def test_project_file_and_profile_overlay(self, tmp_path: Path):
        (tmp_path / "filterdao.yaml").write_text("filterdao:\n  datasource:\n    database: people\n")
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "filterdao-staging.yaml").write_text("filterdao:\n  schema:\n    mode: none\n")

        config = Config.from_sources(tmp_path, active_profiles=["staging"])
        assert config.get("filterdao.datasource.database") == "people"
        assert config.get("filterdao.schema.mode") == "none"
        assert config.get("filterdao.datasource.backend") == "sqlalchemy"
        assert str(config_dir / "filterdao-staging.yaml") + " (profile: staging)" in config.loaded_sources

    def test_toml_project_file(self, tmp_path: Path):
        (tmp_path / "filterdao.toml").write_text('[filterdao.datasource]\nbackend = "memory"\n')
        config = Config.from_sources(tmp_path, active_profiles=[])
        assert config.get("filterdao.datasource.backend") == "memory"

    def test_profiles_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("FILTERDAO_PROFILES_ACTIVE", "test, production")
        config = Config.from_sources(tmp_path)
        assert config.active_profiles == ["test", "production"]
        assert config.get("filterdao.datasource.database") == "filterdao-test"
        assert config.get("filterdao.schema.mode") == "update"

    def test_profiles_from_project_file(self, tmp_path: Path):
        (tmp_path / "filterdao.yaml").write_text("filterdao:\n  profiles:\n    active: test\n")
        assert Config.resolve_profiles(tmp_path) == ["test"]
        assert Config.from_sources(tmp_path).get("filterdao.schema.mode") == "create"

    def test_from_file_outside_convention(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("filterdao:\n  datasource:\n    database: custom\n")
        config = Config.from_file(path, load_defaults=False)
        assert config.get("filterdao.datasource.database") == "custom"
        assert config.loaded_sources == [str(path)]


class TestBinding:
    def test_bind_datasource_defaults(self):
        props = Config.from_sources(active_profiles=[]).bind(DataSourceProperties)
        assert props.backend == "sqlalchemy"
        assert props.database == "filterdao"
        assert props.show_sql is False
        assert props.resolved_url().render_as_string() == "sqlite+aiosqlite:///filterdao.db"

    def test_bind_dashed_keys(self):
        config = Config({"filterdao": {"datasource": {"show-sql": True}}})
        assert config.bind(DataSourceProperties).show_sql is True

    def test_bind_schema_mode(self):
        config = Config({"filterdao": {"schema": {"mode": "none"}}})
        assert config.bind(SchemaProperties).mode is SchemaMode.NONE

    def test_bind_env_override(self, monkeypatch):
        monkeypatch.setenv("FILTERDAO_DATASOURCE_DATABASE", "env-db")
        props = Config.from_sources(active_profiles=[]).bind(DataSourceProperties)
        assert props.database == "env-db"

    def test_resolved_url_with_credentials(self):
        props = DataSourceProperties(
            url="postgresql+asyncpg://db.local/{database}", database="people", username="app", password="secret"
        )
        url = props.resolved_url()
        assert url.database == "people"
        assert url.username == "app"
        assert url.password == "secret"
        assert "secret" not in str(url)

    def test_bind_validation_error(self):
        config = Config({"filterdao": {"datasource": {"backend": "mongodb"}}})
        with pytest.raises(ValueError, match="DataSourceProperties"):
            config.bind(DataSourceProperties)

    def test_bind_empty_database_rejected(self):
        config = Config({"filterdao": {"datasource": {"database": ""}}})
        with pytest.raises(ValueError):
            config.bind(DataSourceProperties)

    def test_bind_dataclass_coerces_strings(self):
        @config_properties(prefix="filterdao.pool")
        @dataclass
        class PoolProperties:
            size: int = 5
            recycle: bool = False

        config = Config({"filterdao": {"pool": {"size": "10", "recycle": "yes"}}})
        props = config.bind(PoolProperties)
        assert props.size == 10
        assert props.recycle is True

    def test_bind_requires_decorator(self):
        class Plain(BaseModel):
            name: str = ""

        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Plain)
