"""Reporting hook for volume computations.

The engine never logs directly. It reports structured before/after values to
an injected observer; LoggingVolumeObserver forwards them to structlog.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

import structlog

from arbsizer.logging import get_logger
from arbsizer.models import Leg

logger = get_logger(__name__)


@dataclass(frozen=True)
class VolumeEvent:
    """One structured record emitted by the engine."""

    name: str
    leg: Leg | None = None
    level: str = "info"
    values: dict[str, Any] = field(default_factory=dict)


class VolumeObserver(Protocol):
    def __call__(self, event: VolumeEvent) -> None: ...


class LoggingVolumeObserver:
    """Forward volume events to a structlog logger.

    Args:
        bound_logger: Logger to write to. Defaults to this module's logger;
            pass one with bound context (e.g. venue names) to tag records.
    """

    def __init__(self, bound_logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = bound_logger or logger

    def __call__(self, event: VolumeEvent) -> None:
        fields = {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in event.values.items()
        }
        if event.leg is not None:
            fields["leg"] = event.leg.value
        getattr(self._logger, event.level)(event.name, **fields)


class RecordingVolumeObserver:
    """Keep every event in memory, for diagnostics and tests."""

    def __init__(self) -> None:
        self.events: list[VolumeEvent] = []

    def __call__(self, event: VolumeEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> list[VolumeEvent]:
        return [event for event in self.events if event.name == name]
