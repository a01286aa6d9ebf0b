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
"""Unified exception hierarchy for filterdao.

All data access errors inherit from DaoException, so callers can catch
the whole family at once or target a single failure mode.

Categories:
- BusinessException: malformed filters, missing targets, constraint violations
- InfrastructureException: the storage backend cannot be reached
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Base Exception
# =============================================================================


class DaoException(Exception):
    """Base exception for all filterdao errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "FILTER_INVALID").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.context: dict[str, Any] = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(DaoException):
    """Errors caused by the request itself rather than the infrastructure."""


class InvalidFilterError(BusinessException):
    """A filter is malformed: unknown field, or operator and value do not fit."""

    default_code = "FILTER_INVALID"


class UnsupportedOperatorError(BusinessException):
    """The storage backend cannot express the requested operator."""

    default_code = "OPERATOR_UNSUPPORTED"


class NotFoundError(BusinessException):
    """The entity targeted by an update or delete does not exist."""

    default_code = "NOT_FOUND"


class PersistenceError(BusinessException):
    """The backend rejected a write (e.g. duplicate identifier)."""

    default_code = "PERSISTENCE"


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(DaoException):
    """Infrastructure failures: database connectivity, timeouts."""


class BackendUnavailableError(InfrastructureException):
    """The storage backend could not be reached or timed out."""

    default_code = "BACKEND_UNAVAILABLE"
