"""Shared test fixtures."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image as PILImage

from models.feature_engine import FeatureEngine
from models.image import RasterImage
from models.surface import SurfacePoint


@pytest.fixture(autouse=True)
def fresh_feature_engine():
    """Every test starts without a cached detection library handle."""
    FeatureEngine._instance = None
    yield
    FeatureEngine._instance = None


def textured_top_pixels(width: int = 400, height: int = 400, textured_fraction: float = 0.4) -> np.ndarray:
    """
    Dark RGB image with small bright squares in the top part and a flat bottom.
    The squares give FAST plenty of corners; the bottom gives none.
    """
    pixels = np.full((height, width, 3), 30, dtype=np.uint8)
    limit = int(height * textured_fraction) - 8
    for y in range(6, limit, 16):
        for x in range(6, width - 8, 16):
            pixels[y:y + 6, x:x + 6] = 230
    return pixels


def encode_png(pixels: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    PILImage.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def encode_jpeg(pixels: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    PILImage.fromarray(pixels).save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def grid_points(n_per_axis: int) -> list[SurfacePoint]:
    """Points spread evenly over the whole percentage plane."""
    step = 100 / n_per_axis
    return [
        SurfacePoint(x=(i + 0.5) * step, y=(j + 0.5) * step, confidence=0.8)
        for j in range(n_per_axis)
        for i in range(n_per_axis)
    ]


@pytest.fixture
def textured_image() -> RasterImage:
    return RasterImage(pixels=textured_top_pixels(), source="textured.png")


@pytest.fixture
def flat_image() -> RasterImage:
    return RasterImage(pixels=np.full((300, 400, 3), 128, dtype=np.uint8), source="flat.png")


@pytest.fixture
def textured_png() -> bytes:
    return encode_png(textured_top_pixels())


@pytest.fixture
def flat_png() -> bytes:
    return encode_png(np.full((60, 80, 3), 200, dtype=np.uint8))
