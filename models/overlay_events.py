from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from models.placement_state import PlacementState


class ArStatus(str, Enum):
    NOT_PRESENTING = "not-presenting"
    SESSION_STARTED = "session-started"
    FAILED = "failed"


class RendererEventKind(str, Enum):
    LOAD = "load"
    ERROR = "error"
    AR_STATUS = "ar-status"


@dataclass(frozen=True)
class RendererEvent:
    kind: RendererEventKind
    ar_status: ArStatus | None = None  # only set for AR_STATUS events
    detail: str | None = None

    @classmethod
    def from_raw(cls, name: str, status: str | None = None) -> "RendererEvent":
        """Build an event from the viewer's raw event name / status string."""
        kind = RendererEventKind(name)
        if kind is RendererEventKind.AR_STATUS:
            return cls(kind=kind, ar_status=ArStatus(status))
        return cls(kind=kind, detail=status)


class OverlayRenderer(Protocol):
    """Opaque 3D viewer. Consumes the model URI and current transform only."""

    def render(self, model_uri: str, state: PlacementState) -> None:
        ...
