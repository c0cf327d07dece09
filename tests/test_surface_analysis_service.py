"""Tests for the grid-based surface analyzer."""

import pytest

from conftest import grid_points
from models.errors import AnalysisFailed
from models.surface import Point, SurfaceCandidate, SurfacePoint
from services.surface_analysis_service import SurfaceAnalysisService


@pytest.fixture
def analyzer() -> SurfaceAnalysisService:
    return SurfaceAnalysisService()


def _pt(x, y):
    return SurfacePoint(x=x, y=y, confidence=0.8)


# ─── empty input ──────────────────────────────────────────────────────

def test_empty_points_single_default_candidate(analyzer):
    result = analyzer.analyze([], 800, 600)
    assert len(result.candidates) == 1
    candidate = result.candidates[0]
    assert candidate.center == Point(50.0, 50.0)
    assert candidate.confidence == pytest.approx(0.3)
    assert 1.5 <= result.suggestion.scale <= 5


def test_empty_points_800x600_default_suggestion(analyzer):
    result = analyzer.analyze([], 800, 600)
    assert result.suggestion.position == Point(50.0, 50.0)
    assert result.suggestion.scale == pytest.approx(2.5)


@pytest.mark.parametrize("size", [(100, 1000), (3000, 500), (1, 1)])
def test_empty_points_any_size_in_range(analyzer, size):
    result = analyzer.analyze([], *size)
    assert 1.5 <= result.suggestion.scale <= 5


# ─── clustering ───────────────────────────────────────────────────────

def test_dense_cell_is_not_a_candidate(analyzer):
    # 10 points crowded in the top-left cell: threshold = max(1, 10/64*2) = 1
    points = [_pt(1 + i * 0.5, 1 + i * 0.5) for i in range(10)]
    candidates = analyzer.find_candidates(points)
    assert all(c.center != Point(6.25, 6.25) for c in candidates)
    assert len(candidates) == 5
    assert all(c.confidence == pytest.approx(1.0) for c in candidates)


def test_candidates_keep_row_major_order_on_ties(analyzer):
    points = [_pt(1, 1)] * 10
    candidates = analyzer.find_candidates(points)
    centers = [c.center for c in candidates]
    assert centers == [
        Point(18.75, 6.25), Point(31.25, 6.25), Point(43.75, 6.25),
        Point(56.25, 6.25), Point(68.75, 6.25),
    ]


def test_candidate_area_is_one_grid_cell(analyzer):
    candidates = analyzer.find_candidates([_pt(50, 50)])
    assert all(c.area == pytest.approx(12.5 * 12.5) for c in candidates)


def test_confidence_falls_with_count(analyzer):
    # five points in every cell but the top-left, which gets three
    points = []
    for row in range(8):
        for col in range(8):
            if (row, col) != (0, 0):
                points += [_pt(col * 12.5 + 6, row * 12.5 + 6)] * 5
    points += [_pt(5, 5)] * 3
    threshold = len(points) / 64 * 2  # 318 points -> 9.9375

    candidates = analyzer.find_candidates(points)
    assert candidates[0].center == Point(6.25, 6.25)
    assert candidates[0].confidence == pytest.approx(1 - 3 / threshold)
    assert candidates[1].confidence == pytest.approx(1 - 5 / threshold)


def test_one_point_per_cell(analyzer):
    # 64 points -> threshold 2, every cell scores 0.5
    candidates = analyzer.find_candidates(grid_points(8))
    assert [c.center for c in candidates] == [Point(6.25 + 12.5 * i, 6.25) for i in range(5)]
    assert all(c.confidence == pytest.approx(0.5) for c in candidates)


def test_points_on_far_edge_land_in_last_cell(analyzer):
    grid = analyzer._count_grid([_pt(100, 100), _pt(0, 0)])
    assert grid[7][7] == 1
    assert grid[0][0] == 1


def test_at_most_five_candidates(analyzer):
    assert len(analyzer.find_candidates(grid_points(4))) == 5


# ─── position ─────────────────────────────────────────────────────────

def test_position_prefers_lower_candidates(analyzer):
    candidates = [
        SurfaceCandidate(Point(50, 10), 156.25, 0.9),
        SurfaceCandidate(Point(60, 60), 156.25, 0.5),
    ]
    assert analyzer.suggest_position(candidates) == Point(60, 60)


def test_position_falls_back_to_all_candidates(analyzer):
    candidates = [
        SurfaceCandidate(Point(50, 35), 156.25, 0.9),
        SurfaceCandidate(Point(50, 20), 156.25, 0.5),
    ]
    assert analyzer.suggest_position(candidates) == Point(50, 35)


@pytest.mark.parametrize("raw, expected", [
    (Point(0, 100), Point(20, 70)),
    (Point(100, 45), Point(80, 45)),
    (Point(6.25, 93.75), Point(20, 70)),
    (Point(-20, 41), Point(20, 41)),
])
def test_position_clamped(analyzer, raw, expected):
    assert analyzer.suggest_position([SurfaceCandidate(raw, 1, 1.0)]) == expected


def test_position_clamp_low_y_when_no_lower_candidates(analyzer):
    position = analyzer.suggest_position([SurfaceCandidate(Point(50, 5), 1, 1.0)])
    assert position == Point(50, 30)


# ─── scale ────────────────────────────────────────────────────────────

def _candidates(confidence):
    return [SurfaceCandidate(Point(50, 50), 156.25, confidence)]


@pytest.mark.parametrize("confidence", [0.0, 0.1, 0.3, 0.5, 0.9, 1.0])
@pytest.mark.parametrize("size", [(800, 600), (1600, 600), (600, 1600), (10000, 10), (10, 10000)])
def test_scale_always_in_range(analyzer, confidence, size):
    assert 1.5 <= analyzer.suggest_scale(_candidates(confidence), *size) <= 5


def test_scale_neutral_aspect(analyzer):
    assert analyzer.suggest_scale(_candidates(0.5), 800, 600) == pytest.approx(3.0)


def test_scale_wide_aspect(analyzer):
    assert analyzer.suggest_scale(_candidates(0.5), 1600, 600) == pytest.approx(3.6)


def test_scale_tall_aspect(analyzer):
    assert analyzer.suggest_scale(_candidates(0.5), 600, 1600) == pytest.approx(2.4)


def test_scale_full_confidence_wide(analyzer):
    assert analyzer.suggest_scale(_candidates(1.0), 1600, 600) == pytest.approx(4.8)


def test_scale_aspect_thresholds_are_exclusive(analyzer):
    assert analyzer.suggest_scale(_candidates(0.5), 150, 100) == pytest.approx(3.0)
    assert analyzer.suggest_scale(_candidates(0.5), 70, 100) == pytest.approx(3.0)


# ─── scenarios ────────────────────────────────────────────────────────

def test_uniform_points_on_wide_image(analyzer):
    points = [_pt((i % 20) * 5 + 2.5, (i // 20) * 10 + 5) for i in range(200)]
    result = analyzer.analyze(points, 1600, 600)
    avg = sum(c.confidence for c in result.candidates) / len(result.candidates)
    assert result.suggestion.scale == pytest.approx(min(5, (2 + 2 * avg) * 1.2))
    assert result.suggestion.scale <= 5


def test_suggestion_always_clamped(analyzer):
    # features everywhere except the bottom-left corner cell
    points = [p for p in grid_points(16) if not (p.x < 12.5 and p.y > 87.5)]
    result = analyzer.analyze(points, 1000, 1000)
    assert result.candidates[0].center == Point(6.25, 93.75)
    assert result.suggestion.position == Point(20, 70)


def test_analyze_is_deterministic(analyzer):
    points = grid_points(5) + [_pt(33, 71)]
    assert analyzer.analyze(points, 640, 480) == analyzer.analyze(points, 640, 480)


@pytest.mark.parametrize("size", [(0, 100), (100, 0), (-5, 10)])
def test_invalid_dimensions(analyzer, size):
    with pytest.raises(AnalysisFailed):
        analyzer.analyze([_pt(10, 10)], *size)
