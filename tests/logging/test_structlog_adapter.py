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
"""Tests for StructlogAdapter — default LoggingPort implementation."""

import json
import logging

import pytest

from filterdao.core.config import Config
from filterdao.logging.port import LoggingPort
from filterdao.logging.structlog_adapter import StructlogAdapter


@pytest.fixture(autouse=True)
def _restore_levels():
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    root.handlers[:] = handlers
    logging.getLogger("filterdao.data").setLevel(logging.NOTSET)
    logging.getLogger().setLevel(logging.WARNING)


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"
        assert adapter._module_levels == {}

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"filterdao": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"filterdao": {"logging": {"level": {"root": "INFO", "filterdao.data": "DEBUG"}}}})
        adapter.configure(config)
        assert adapter._module_levels == {"filterdao.data": "DEBUG"}
        assert logging.getLogger("filterdao.data").level == logging.DEBUG

    def test_configure_from_packaged_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config.from_sources(active_profiles=[]))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_json_format_renders_stdlib_records(self, capsys):
        adapter = StructlogAdapter()
        adapter.configure(Config({"filterdao": {"logging": {"format": "json"}}}))
        assert adapter._format == "json"

        logging.getLogger("filterdao.data.dao").info("Created %s id=%s", "Person", "p-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Created Person id=p-1"
        assert record["level"] == "info"
        assert record["logger"] == "filterdao.data.dao"


class TestStructlogAdapterLoggers:
    def test_get_logger_returns_bound_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("filterdao.test")
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("filterdao.data", "warning")
        assert logging.getLogger("filterdao.data").level == logging.WARNING
