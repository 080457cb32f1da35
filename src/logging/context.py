# src/logging/context.py - v2
"""Contextual logging support: attach project_id, upload_session, operation to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per storage operation.
_project_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "project_id", default=None
)
_upload_session: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "upload_session", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    project_id: str | None = None
    upload_session: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        project_id=_project_id.get(),
        upload_session=_upload_session.get(),
        operation=_operation.get(),
    )


def set_project_context(project_id: int | str) -> None:
    _project_id.set(str(project_id))


def set_session_context(upload_session: str) -> None:
    _upload_session.set(upload_session)


def set_operation_context(operation: str) -> None:
    """Set the name of the storage operation being executed."""
    _operation.set(operation)


def clear_context() -> None:
    """Reset all context variables."""
    _project_id.set(None)
    _upload_session.set(None)
    _operation.set(None)
