from __future__ import annotations


class OverlayPreviewError(Exception):
    """Base class for every error raised by the overlay preview core."""


class AnalysisError(OverlayPreviewError):
    """
    Recoverable failure of the surface analysis pipeline.
    Callers substitute the default placement suggestion.
    """


class DetectionUnavailable(AnalysisError):
    """The feature-detection library could not be loaded."""


class AnalysisFailed(AnalysisError):
    """Grayscale / blur / corner / clustering step raised on a loaded raster."""


class ImageDecodeFailed(OverlayPreviewError):
    """The uploaded image could not be turned into a raster. Shown to the user."""


class ConversionFailed(OverlayPreviewError):
    """Format normalization (HEIC -> JPEG) failed. Original bytes are used instead."""
