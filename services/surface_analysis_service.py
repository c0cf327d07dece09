import logging
import math
from typing import List, Sequence

from models.errors import AnalysisFailed
from models.surface import (
    DEFAULT_SUGGESTION,
    PlacementSuggestion,
    Point,
    SurfaceAnalysis,
    SurfaceCandidate,
    SurfacePoint,
)

logger = logging.getLogger(__name__)


class SurfaceAnalysisService:
    """
    Turns feature points into candidate placement regions and one suggestion.

    Heuristic: grid cells with few corners are treated as flat surfaces,
    dense cells as texture or edges. Nothing here verifies geometry; the
    output is a deterministic function of the points and image size.
    """

    GRID_SIZE = 8
    MAX_CANDIDATES = 5
    DEFAULT_CANDIDATE = SurfaceCandidate(center=Point(50.0, 50.0), area=2500.0, confidence=0.3)

    # Position selection
    PREFERRED_MIN_Y = 40.0
    POSITION_X_RANGE = (20.0, 80.0)
    POSITION_Y_RANGE = (30.0, 70.0)

    # Scale selection
    BASE_SCALE = 2.0
    CONFIDENCE_SCALE = 2.0
    WIDE_ASPECT = 1.5
    TALL_ASPECT = 0.7
    WIDE_FACTOR = 1.2
    TALL_FACTOR = 0.8
    SCALE_RANGE = (1.5, 5.0)

    @staticmethod
    def _clamp(value: float, low: float, high: float) -> float:
        return max(low, min(high, value))

    # ─── clustering ───────────────────────────────────────────────────
    def _count_grid(self, points: Sequence[SurfacePoint]) -> List[List[int]]:
        cell = 100 / self.GRID_SIZE
        grid = [[0] * self.GRID_SIZE for _ in range(self.GRID_SIZE)]
        last = self.GRID_SIZE - 1
        for p in points:
            col = max(0, min(math.floor(p.x / cell), last))
            row = max(0, min(math.floor(p.y / cell), last))
            grid[row][col] += 1
        return grid

    def find_candidates(self, points: Sequence[SurfacePoint]) -> List[SurfaceCandidate]:
        """
        Low-density grid cells, best first.

        A cell qualifies when its point count is at most
        max(1, 2 * n / cells); its confidence falls linearly with the count.
        """
        if not points:
            return [self.DEFAULT_CANDIDATE]

        cell = 100 / self.GRID_SIZE
        grid = self._count_grid(points)
        threshold = max(1.0, len(points) / (self.GRID_SIZE * self.GRID_SIZE) * 2)

        candidates: List[SurfaceCandidate] = []
        for row in range(self.GRID_SIZE):
            for col in range(self.GRID_SIZE):
                count = grid[row][col]
                if count > threshold:
                    continue
                candidates.append(SurfaceCandidate(
                    center=Point((col + 0.5) * cell, (row + 0.5) * cell),
                    area=cell * cell,
                    confidence=max(0.1, 1 - count / threshold),
                ))

        # sorted() is stable, so ties keep row-major order
        candidates = sorted(candidates, key=lambda c: c.confidence, reverse=True)
        return candidates[: self.MAX_CANDIDATES]

    # ─── suggestion ───────────────────────────────────────────────────
    def suggest_position(self, candidates: Sequence[SurfaceCandidate]) -> Point:
        if not candidates:
            return DEFAULT_SUGGESTION.position

        # Objects usually sit in the lower part of a frame
        lower = [c for c in candidates if c.center.y > self.PREFERRED_MIN_Y]
        best = (lower or list(candidates))[0]
        return Point(
            self._clamp(best.center.x, *self.POSITION_X_RANGE),
            self._clamp(best.center.y, *self.POSITION_Y_RANGE),
        )

    def suggest_scale(self, candidates: Sequence[SurfaceCandidate], img_w: int, img_h: int) -> float:
        if not candidates:
            return DEFAULT_SUGGESTION.scale

        avg_confidence = sum(c.confidence for c in candidates) / len(candidates)
        aspect_ratio = img_w / img_h

        scale = self.BASE_SCALE + avg_confidence * self.CONFIDENCE_SCALE
        if aspect_ratio > self.WIDE_ASPECT:
            scale *= self.WIDE_FACTOR
        elif aspect_ratio < self.TALL_ASPECT:
            scale *= self.TALL_FACTOR
        return self._clamp(scale, *self.SCALE_RANGE)

    def analyze(self, points: Sequence[SurfacePoint], img_w: int, img_h: int) -> SurfaceAnalysis:
        """
        Args:
            points: feature points in percentage coordinates.
            img_w, img_h: source image size in pixels (only the ratio is used).

        Returns:
            SurfaceAnalysis with the suggestion and up to five candidates.

        Raises:
            AnalysisFailed: for non-positive image dimensions.
        """
        if img_w <= 0 or img_h <= 0:
            raise AnalysisFailed(f"Invalid image dimensions {img_w}x{img_h}")

        candidates = self.find_candidates(points)
        if not points:
            logger.debug("No feature points, using default placement")
            return SurfaceAnalysis(suggestion=DEFAULT_SUGGESTION, candidates=candidates)

        suggestion = PlacementSuggestion(
            position=self.suggest_position(candidates),
            scale=self.suggest_scale(candidates, img_w, img_h),
        )
        logger.debug(
            f"{len(points)} points -> {len(candidates)} candidates, "
            f"suggestion ({suggestion.position.x:.1f}, {suggestion.position.y:.1f}) x{suggestion.scale:.2f}"
        )
        return SurfaceAnalysis(suggestion=suggestion, candidates=candidates)
