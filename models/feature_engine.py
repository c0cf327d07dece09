# models/feature_engine.py
"""
Singleton wrapper around the corner-detection library (OpenCV).

• Imports the library lazily, once per Python process.
• ensure_loaded() is idempotent and lock-guarded so concurrent sessions
  initialise it only once.
• A failed load is not remembered; the next caller tries again.
"""
from __future__ import annotations
import importlib
import logging
import os
import threading
from typing import List

import numpy as np
from dotenv import load_dotenv

from models.errors import DetectionUnavailable

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class FeatureEngine:
    _instance: "FeatureEngine" | None = None
    _instance_lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._init_engine(*args, **kwargs)
                    cls._instance = instance
        return cls._instance

    # --------------------------------------------------
    def _init_engine(self, module_name: str | None = None) -> None:
        self.module_name = module_name or os.getenv("FEATURE_ENGINE_MODULE", "cv2")
        self._cv = None
        self._load_lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._cv is not None

    def ensure_loaded(self) -> None:
        """Import the library on first use. Raises DetectionUnavailable on failure."""
        if self._cv is not None:
            return
        with self._load_lock:
            if self._cv is not None:
                return
            try:
                self._cv = importlib.import_module(self.module_name)
            except Exception as err:
                logger.error(f"Failed to load feature detection library '{self.module_name}': {err}")
                raise DetectionUnavailable(
                    f"Failed to load surface detection library '{self.module_name}'"
                ) from err
            logger.info(f"Feature detection library loaded: {self.module_name}")

    # --------------------------------------------------
    def grayscale(self, pixels: np.ndarray) -> np.ndarray:
        """
        Args
        ----
        pixels : np.ndarray  (H, W) | (H, W, 3) RGB | (H, W, 4) RGBA, uint8

        Returns
        -------
        gray : np.ndarray  (H, W)  uint8
        """
        self.ensure_loaded()
        if pixels.ndim == 2:
            return pixels.copy()
        code = self._cv.COLOR_RGBA2GRAY if pixels.shape[2] == 4 else self._cv.COLOR_RGB2GRAY
        return self._cv.cvtColor(pixels, code)

    def blur(self, gray: np.ndarray, size: int) -> np.ndarray:
        """Gaussian blur with a size x size kernel (size forced odd)."""
        self.ensure_loaded()
        if size <= 1:
            return gray
        if size % 2 == 0:
            size += 1
        return self._cv.GaussianBlur(gray, (size, size), 0)

    def find_corners(self, gray: np.ndarray, threshold: int) -> List[int]:
        """
        FAST corners on a grayscale image.

        Returns a flat [x0, y0, x1, y1, ...] list of pixel coordinates.
        """
        self.ensure_loaded()
        detector = self._cv.FastFeatureDetector_create(
            threshold=int(threshold), nonmaxSuppression=False
        )
        corners: List[int] = []
        for keypoint in detector.detect(gray, None):
            x, y = keypoint.pt
            corners.extend((int(round(x)), int(round(y))))
        return corners
