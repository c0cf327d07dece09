from __future__ import annotations
from typing import List
import logging
import os

from dotenv import load_dotenv

from models.errors import AnalysisFailed
from models.image import RasterImage
from models.surface import SurfacePoint
from repositories.feature_engine_repository import FeatureEngineRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class FeatureDetectionService:
    """
    Business logic on top of the raw corner detector.
    Produces feature points in percentage-of-image coordinates.
    """

    def __init__(self):
        self.FAST_THRESHOLD = int(os.getenv("FEATURE_FAST_THRESHOLD", "25"))
        self.BLUR_SIZE = int(os.getenv("FEATURE_BLUR_SIZE", "3"))
        self.POINT_CONFIDENCE = float(os.getenv("FEATURE_POINT_CONFIDENCE", "0.8"))
        self.feature_engine_repository = FeatureEngineRepository()

    def ensure_loaded(self) -> None:
        """Raises DetectionUnavailable if the detection library cannot be loaded."""
        self.feature_engine_repository.ensure_loaded()

    def to_surface_points(self, corners: List[int], width: int, height: int) -> List[SurfacePoint]:
        """Map a flat [x0, y0, x1, y1, ...] pixel list onto percentages."""
        return [
            SurfacePoint(
                x=corners[i] / width * 100,
                y=corners[i + 1] / height * 100,
                confidence=self.POINT_CONFIDENCE,
            )
            for i in range(0, len(corners) - 1, 2)
        ]

    def detect_features(self, img: RasterImage) -> List[SurfacePoint]:
        """
        Grayscale -> blur -> FAST corners over the full image.

        Raises:
            DetectionUnavailable: the library failed to load.
            AnalysisFailed: any step raised on the loaded raster.
        """
        self.ensure_loaded()
        try:
            corners = self.feature_engine_repository.infer_corners(
                img.pixels, self.BLUR_SIZE, self.FAST_THRESHOLD
            )
        except Exception as err:
            raise AnalysisFailed(f"Corner detection failed: {err}") from err

        points = self.to_surface_points(corners, img.width, img.height)
        logger.debug(f"Detected {len(points)} feature points on {img.width}x{img.height} image")
        return points
