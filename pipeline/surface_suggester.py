# pipeline/surface_suggester.py
from __future__ import annotations
import logging

from models.errors import AnalysisError, DetectionUnavailable
from models.image import RasterImage
from models.surface import AnalysisOutcome, AnalysisSuccess, AnalysisUnavailable
from services.feature_detection_service import FeatureDetectionService
from services.surface_analysis_service import SurfaceAnalysisService

logger = logging.getLogger(__name__)


def suggest_placement(
    img: RasterImage,
    *,
    feature_detection_service: FeatureDetectionService | None = None,
    surface_analysis_service: SurfaceAnalysisService | None = None,
) -> AnalysisOutcome:
    """
    For one decoded background image:
        • detect feature points (grayscale -> blur -> corners)
        • cluster them into candidate surfaces
        • derive a default position / scale
    Any analysis error degrades to AnalysisUnavailable with the default
    suggestion; nothing is retried and nothing propagates.
    """
    feature_detection_service = feature_detection_service or FeatureDetectionService()
    surface_analysis_service = surface_analysis_service or SurfaceAnalysisService()

    try:
        points = feature_detection_service.detect_features(img)
        analysis = surface_analysis_service.analyze(points, img.width, img.height)
    except DetectionUnavailable as err:
        logger.warning(f"Surface detection unavailable, using default positioning: {err}")
        return AnalysisUnavailable(reason=str(err))
    except AnalysisError as err:
        logger.warning(f"Surface analysis failed, using default positioning: {err}")
        return AnalysisUnavailable(reason=str(err))

    return AnalysisSuccess(
        suggestion=analysis.suggestion,
        points=points,
        candidates=analysis.candidates,
    )
