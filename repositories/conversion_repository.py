# repositories/conversion_repository.py
from __future__ import annotations
import io
from pathlib import PurePath

from PIL import Image as PILImage
import pillow_heif

from models.errors import ConversionFailed

pillow_heif.register_heif_opener()


class ConversionRepository:
    """
    Format-conversion primitive.

    • Detects camera-native HEIC/HEIF payloads.
    • Re-encodes them into a universally decodable raster format.
    """

    HEIC_MEDIA_TYPES = {"image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence"}
    HEIC_SUFFIXES = {".heic", ".heif"}

    def is_heic(self, data: bytes, declared_format: str | None = None,
                filename: str | None = None) -> bool:
        if declared_format and declared_format.lower() in self.HEIC_MEDIA_TYPES:
            return True
        if filename and PurePath(filename).suffix.lower() in self.HEIC_SUFFIXES:
            return True
        return bool(pillow_heif.is_supported(io.BytesIO(data)))

    @staticmethod
    def convert(data: bytes, target_format: str = "JPEG", quality: float = 0.8) -> bytes:
        """
        Args
        ----
        data : encoded source bytes
        target_format : Pillow format name
        quality : 0‥1, mapped onto Pillow's 1‥95 JPEG quality scale

        Returns
        -------
        encoded bytes in *target_format*
        """
        pil_quality = max(1, min(95, int(round(quality * 100))))
        try:
            with PILImage.open(io.BytesIO(data)) as pil_img:
                out = io.BytesIO()
                pil_img.convert("RGB").save(out, format=target_format, quality=pil_quality)
        except Exception as err:
            raise ConversionFailed(f"Failed to convert image to {target_format}: {err}") from err
        return out.getvalue()
