from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class Point:
    x: float  # percent of image width, 0 = left
    y: float  # percent of image height, 0 = top


@dataclass(frozen=True)
class SurfacePoint:
    """A detected feature point in percentage-of-image coordinates."""
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class SurfaceCandidate:
    """
    Grid cell hypothesised to be a flat, low-texture placement area.
    """
    center: Point
    area: float        # percentage² of the image
    confidence: float  # [0, 1]


@dataclass(frozen=True)
class PlacementSuggestion:
    position: Point
    scale: float


DEFAULT_SUGGESTION = PlacementSuggestion(position=Point(50.0, 50.0), scale=2.5)


@dataclass(frozen=True)
class SurfaceAnalysis:
    """Analyzer output: the suggestion plus the candidates it was derived from."""
    suggestion: PlacementSuggestion
    candidates: List[SurfaceCandidate]


@dataclass(frozen=True)
class AnalysisSuccess:
    suggestion: PlacementSuggestion
    points: List[SurfacePoint]
    candidates: List[SurfaceCandidate]

    @property
    def is_available(self) -> bool:
        return True


@dataclass(frozen=True)
class AnalysisUnavailable:
    """
    Detection could not run. Still carries a usable default suggestion so
    downstream code never branches on a missing one.
    """
    reason: str
    suggestion: PlacementSuggestion = DEFAULT_SUGGESTION
    points: List[SurfacePoint] = field(default_factory=list)
    candidates: List[SurfaceCandidate] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return False


AnalysisOutcome = Union[AnalysisSuccess, AnalysisUnavailable]
