from typing import List
import numpy as np

from models.feature_engine import FeatureEngine


class FeatureEngineRepository:
    """
    Thin wrapper around FeatureEngine that runs the raw corner pipeline.
    """

    def __init__(self):
        self.engine = FeatureEngine()  # Singleton is handled inside

    def ensure_loaded(self) -> None:
        self.engine.ensure_loaded()

    def infer_corners(self, pixels: np.ndarray, blur_size: int, threshold: int) -> List[int]:
        gray = self.engine.grayscale(pixels)
        blurred = self.engine.blur(gray, blur_size)
        return self.engine.find_corners(blurred, threshold)
