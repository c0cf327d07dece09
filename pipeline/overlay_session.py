# pipeline/overlay_session.py
"""
One preview session: a background photo, a 3D model on top of it, and the
controls that move it around.

Analysis of a new photo runs in worker threads so drag / zoom keep working
while it is pending. Each new photo bumps a generation counter; results for
an older generation are dropped instead of applied.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable

from models.errors import ImageDecodeFailed
from models.image import RasterImage
from models.overlay_events import ArStatus, OverlayRenderer, RendererEvent, RendererEventKind
from models.placement_state import PlacementState
from models.surface import AnalysisOutcome
from pipeline.surface_suggester import suggest_placement
from services.image_service import ImageService
from services.placement_service import Pointer, PlacementService

logger = logging.getLogger(__name__)

BANNER_LOADING = "loading"
BANNER_MODEL_ERROR = "model_error"
BANNER_IMAGE_ERROR = "image_error"


class OverlaySession:
    """Orchestrates normalization, analysis, placement and rendering for one preview."""

    def __init__(
        self,
        model_uri: str,
        *,
        renderer: OverlayRenderer | None = None,
        image_service: ImageService | None = None,
        placement_service: PlacementService | None = None,
        suggester: Callable[[RasterImage], AnalysisOutcome] = suggest_placement,
    ):
        self.model_uri = model_uri
        self.renderer = renderer
        self.image_service = image_service or ImageService()
        self.placement_service = placement_service or PlacementService()
        self.suggester = suggester

        self.is_loading = True          # until the renderer reports load / error
        self.has_model_error = False
        self.has_image_error = False
        self.is_analyzing = False
        self.ar_status = ArStatus.NOT_PRESENTING
        self.outcome: AnalysisOutcome | None = None
        self.background: RasterImage | None = None
        self._generation = 0

    # ─── read-only views ──────────────────────────────────────────────
    @property
    def state(self) -> PlacementState:
        return self.placement_service.state

    @property
    def banner(self) -> str | None:
        if self.has_image_error:
            return BANNER_IMAGE_ERROR
        if self.has_model_error:
            return BANNER_MODEL_ERROR
        if self.is_loading:
            return BANNER_LOADING
        return None

    @property
    def status_message(self) -> str:
        if self.is_analyzing:
            return "Analyzing surface..."
        if self.placement_service.show_suggestion:
            return "Suggested placement ready • Apply it or drag to place manually"
        return "Drag to move • Use controls to resize"

    def _render(self) -> None:
        if self.renderer is not None:
            self.renderer.render(self.model_uri, self.state)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # ─── background image ─────────────────────────────────────────────
    async def on_background_image_changed(
        self,
        source: bytes,
        declared_format: str | None = None,
        filename: str | None = None,
    ) -> AnalysisOutcome | None:
        """
        Normalize -> decode -> analyze a new background photo.

        Returns the outcome handed to the placement controller, or None when the
        photo failed to decode or a newer photo superseded this one.
        """
        self._generation += 1
        generation = self._generation
        self.placement_service.discard_suggestion()
        self.outcome = None
        self.background = None
        self.has_image_error = False
        self.is_analyzing = True

        try:
            return await self._analyze_background(generation, source, declared_format, filename)
        finally:
            if self._is_current(generation):
                self.is_analyzing = False

    async def _analyze_background(
        self,
        generation: int,
        source: bytes,
        declared_format: str | None,
        filename: str | None,
    ) -> AnalysisOutcome | None:
        try:
            handle = await asyncio.to_thread(
                self.image_service.normalize, source, declared_format, filename
            )
            with handle:
                if not self._is_current(generation):
                    logger.debug(f"Discarding stale upload for generation {generation}")
                    return None
                raster = await asyncio.to_thread(self.image_service.rasterize, handle)
        except ImageDecodeFailed as err:
            if self._is_current(generation):
                logger.error(f"Failed to load image for analysis: {err}")
                self.has_image_error = True
            return None

        if not self._is_current(generation):
            logger.debug(f"Discarding stale raster for generation {generation}")
            return None
        self.background = raster

        outcome = await asyncio.to_thread(self.suggester, raster)
        if not self._is_current(generation):
            logger.debug(f"Discarding stale analysis for generation {generation}")
            return None

        self.outcome = outcome
        self.placement_service.offer_suggestion(outcome.suggestion)
        logger.info(
            f"Placement suggestion ready ({'detected' if outcome.is_available else 'default'}): "
            f"({outcome.suggestion.position.x:.1f}, {outcome.suggestion.position.y:.1f}) "
            f"x{outcome.suggestion.scale:.2f}"
        )
        return outcome

    # ─── user gestures ────────────────────────────────────────────────
    def accept_suggestion(self) -> PlacementState:
        state = self.placement_service.apply_suggestion()
        self._render()
        return state

    def begin_drag(self, pointer: Pointer) -> None:
        self.placement_service.begin_drag(pointer)

    def update_drag(self, pointer: Pointer) -> PlacementState:
        state = self.placement_service.update_drag(pointer)
        self._render()
        return state

    def end_drag(self) -> None:
        self.placement_service.end_drag()

    def zoom_in(self) -> PlacementState:
        state = self.placement_service.zoom_in()
        self._render()
        return state

    def zoom_out(self) -> PlacementState:
        state = self.placement_service.zoom_out()
        self._render()
        return state

    def reset(self) -> PlacementState:
        state = self.placement_service.reset()
        self._render()
        return state

    # ─── renderer events ──────────────────────────────────────────────
    def handle_renderer_event(self, event: RendererEvent) -> None:
        """Translate viewer events into UI flags. Placement is never touched here."""
        if event.kind is RendererEventKind.LOAD:
            self.is_loading = False
            self.has_model_error = False
        elif event.kind is RendererEventKind.ERROR:
            logger.error(f"Model failed to load: {self.model_uri} {event.detail or ''}".rstrip())
            self.is_loading = False
            self.has_model_error = True
        elif event.kind is RendererEventKind.AR_STATUS:
            self._update_ar_status(event.ar_status)

    def _update_ar_status(self, status: ArStatus | None) -> None:
        if status is None:
            return
        # session-started and failed exclude each other until not-presenting
        if (
            status is not ArStatus.NOT_PRESENTING
            and self.ar_status is not ArStatus.NOT_PRESENTING
            and status is not self.ar_status
        ):
            logger.warning(f"Ignoring AR status {status.value} while {self.ar_status.value}")
            return
        if status is ArStatus.FAILED:
            logger.error("AR session failed to start")
        logger.info(f"AR Status: {status.value}")
        self.ar_status = status
