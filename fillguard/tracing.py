"""Tracing collaborators for classifier decisions."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEvent:
    """A single noteworthy classifier decision."""

    kind: str
    node_type: str = ""
    detail: str = ""

    def __str__(self) -> str:
        parts = [self.kind]
        if self.node_type:
            parts.append(f"[{self.node_type}]")
        if self.detail:
            parts.append(self.detail)
        return " ".join(parts)


class Tracer(ABC):
    """Receives trace events emitted during classification."""

    @abstractmethod
    def trace(self, event: TraceEvent) -> None: ...


class NullTracer(Tracer):
    """Default tracer — discards every event."""

    def trace(self, event: TraceEvent) -> None:
        return None


class LoggingTracer(Tracer):
    """Forwards events to the module logger at DEBUG level."""

    def trace(self, event: TraceEvent) -> None:
        logger.debug("trace: %s", event)


@dataclass
class RecordingTracer(Tracer):
    """Keeps every event in memory, in emission order."""

    events: list[TraceEvent] = field(default_factory=list)

    def trace(self, event: TraceEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]
