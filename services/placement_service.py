from __future__ import annotations
from typing import Tuple
import logging
import os

from dotenv import load_dotenv

from models.placement_state import PlacementPhase, PlacementState
from models.surface import PlacementSuggestion, Point

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

Pointer = Tuple[float, float]  # absolute pixel position of the pointer


class PlacementService:
    """
    Interactive placement state machine.

    IDLE -> SUGGESTED -> (USER_OVERRIDDEN | reset) -> IDLE

    Every mutation clamps immediately, so the state is never observed
    out of range between a gesture and a render.
    """

    CENTER = Point(50.0, 50.0)
    POSITION_RANGE = (0.0, 100.0)
    ZOOM_STEP = 0.2
    ZOOM_RANGE = (0.2, 3.0)       # manual controls
    STATE_SCALE_RANGE = (0.2, 5.0)  # anything the state may hold, suggestions included

    def __init__(self, viewport_width: float | None = None, viewport_height: float | None = None):
        self.DEFAULT_SCALE = float(os.getenv("PLACEMENT_DEFAULT_SCALE", "1.0"))
        if viewport_width is None:
            viewport_width = float(os.getenv("VIEWPORT_WIDTH", "1280"))
        if viewport_height is None:
            viewport_height = float(os.getenv("VIEWPORT_HEIGHT", "800"))
        self.set_viewport(viewport_width, viewport_height)

        self.state = PlacementState(position=self.CENTER, scale=self.DEFAULT_SCALE)
        self.phase = PlacementPhase.IDLE
        self.pending_suggestion: PlacementSuggestion | None = None
        self.show_suggestion = False
        self._drag_start: Pointer | None = None

    @staticmethod
    def _clamp(value: float, low: float, high: float) -> float:
        return max(low, min(high, value))

    def _set_position(self, x: float, y: float) -> None:
        self.state.position = Point(
            self._clamp(x, *self.POSITION_RANGE),
            self._clamp(y, *self.POSITION_RANGE),
        )

    def set_viewport(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive, got {width}x{height}")
        self.viewport_width = float(width)
        self.viewport_height = float(height)

    # ─── suggestions ──────────────────────────────────────────────────
    def offer_suggestion(self, suggestion: PlacementSuggestion) -> None:
        """Store a freshly computed suggestion and flag it for display."""
        self.pending_suggestion = suggestion
        self.show_suggestion = True

    def discard_suggestion(self) -> None:
        """Drop a suggestion that belongs to a previous background image."""
        self.pending_suggestion = None
        self.show_suggestion = False

    def apply_suggestion(self, suggestion: PlacementSuggestion | None = None) -> PlacementState:
        """Overwrite the current transform with *suggestion* (or the pending one)."""
        suggestion = suggestion or self.pending_suggestion
        if suggestion is None:
            logger.debug("No suggestion ready, nothing to apply")
            return self.state

        self._set_position(suggestion.position.x, suggestion.position.y)
        self.state.scale = self._clamp(suggestion.scale, *self.STATE_SCALE_RANGE)
        self.phase = PlacementPhase.SUGGESTED
        self.show_suggestion = False
        return self.state

    # ─── drag ─────────────────────────────────────────────────────────
    def begin_drag(self, pointer: Pointer) -> None:
        self.state.is_dragging = True
        self._drag_start = pointer

    def update_drag(self, pointer: Pointer) -> PlacementState:
        """Move by the pointer delta, converted from pixels to viewport percent."""
        if not self.state.is_dragging or self._drag_start is None:
            return self.state

        dx = pointer[0] - self._drag_start[0]
        dy = pointer[1] - self._drag_start[1]
        self._set_position(
            self.state.position.x + dx / self.viewport_width * 100,
            self.state.position.y + dy / self.viewport_height * 100,
        )
        self._drag_start = pointer
        self.phase = PlacementPhase.USER_OVERRIDDEN
        return self.state

    def end_drag(self) -> None:
        self.state.is_dragging = False
        self._drag_start = None

    # ─── zoom ─────────────────────────────────────────────────────────
    def zoom_in(self) -> PlacementState:
        self.state.scale = self._clamp(self.state.scale + self.ZOOM_STEP, *self.ZOOM_RANGE)
        self.phase = PlacementPhase.USER_OVERRIDDEN
        return self.state

    def zoom_out(self) -> PlacementState:
        self.state.scale = self._clamp(self.state.scale - self.ZOOM_STEP, *self.ZOOM_RANGE)
        self.phase = PlacementPhase.USER_OVERRIDDEN
        return self.state

    def reset(self) -> PlacementState:
        self.end_drag()
        self.state.position = self.CENTER
        self.state.scale = self.DEFAULT_SCALE
        self.phase = PlacementPhase.IDLE
        self.show_suggestion = False
        return self.state
