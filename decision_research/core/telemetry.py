"""Telemetry capability for pipeline events.

The pipeline never decides on its own whether telemetry is on: callers inject a
``Telemetry`` implementation. ``build_telemetry`` picks one from settings for the
HTTP layer; tests use ``NoopTelemetry`` or ``RecordingTelemetry``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import structlog

from decision_research.core.config import Settings, settings as default_settings

logger = structlog.get_logger(__name__)


@runtime_checkable
class Telemetry(Protocol):
    """Event sink with a single ``emit`` operation."""

    def emit(self, event: str, payload: dict[str, Any]) -> None: ...


class NoopTelemetry:
    """Drops every event."""

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        return None


class StructlogTelemetry:
    """Writes each event as one structured log line."""

    def __init__(self, logger_name: str = "decision_research.telemetry") -> None:
        self._logger = structlog.get_logger(logger_name)

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        self._logger.info(event, **payload)


class RecordingTelemetry:
    """Keeps events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        self.events.append((event, dict(payload)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def safe_emit(telemetry: Telemetry, event: str, payload: dict[str, Any]) -> None:
    """Emit without letting a sink failure reach the caller."""
    try:
        telemetry.emit(event, payload)
    except Exception as e:
        logger.warning("telemetry_emit_failed", telemetry_event=event, error=str(e))


def build_telemetry(config: Settings | None = None) -> Telemetry:
    """Return the telemetry sink selected by RESEARCH_LOGS."""
    config = config or default_settings
    if not config.RESEARCH_LOGS:
        return NoopTelemetry()
    return StructlogTelemetry()
