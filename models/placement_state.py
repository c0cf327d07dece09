from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from models.surface import Point


class PlacementPhase(str, Enum):
    IDLE = "idle"
    SUGGESTED = "suggested"
    USER_OVERRIDDEN = "user_overridden"


@dataclass
class PlacementState:
    """
    Live overlay transform driving the renderer.
    Only PlacementService writes to it.
    """
    position: Point    # percent of viewport, each axis in [0, 100]
    scale: float       # [0.2, 5]
    is_dragging: bool = False
