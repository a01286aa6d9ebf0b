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
"""Lifecycle protocol for storage backends.

Backends that own engines, pools or in-process stores implement this
protocol. The bootstrap layer calls start() before handing the backend to
any DAO and stop() when the persistence context is closed.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for storage backends."""

    async def start(self) -> None:
        """Acquire resources and validate connectivity.

        A backend that cannot reach its store raises
        :class:`~filterdao.kernel.exceptions.BackendUnavailableError`.
        """
        ...

    async def stop(self) -> None:
        """Release connections and clean up resources."""
        ...
