from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class RasterImage:
    """
    Simple data object: decoded pixels (+ optional source label for bookkeeping).
    Pixels are flagged read-only on creation; stages copy, never mutate.
    """
    pixels: np.ndarray  # Shape (H, W) grayscale or (H, W, 3|4) RGB(A), dtype uint8.
    source: str | None = None  # Filename or label of the upload.

    def __post_init__(self):
        self.pixels.setflags(write=False)

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height
