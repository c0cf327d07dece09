from __future__ import annotations
from pathlib import Path, PurePath
from typing import Union
import logging
import os

from dotenv import load_dotenv

from models.displayable_image import DisplayableImage
from models.errors import ConversionFailed, ImageDecodeFailed
from models.image import RasterImage
from repositories.conversion_repository import ConversionRepository
from repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """
    Image normalizer: turns an arbitrary upload into something decodable.
    No feature detection here.
    """

    def __init__(self):
        self.JPEG_QUALITY = float(os.getenv("HEIC_JPEG_QUALITY", "0.8"))
        self.MAX_UPLOAD_BYTES = int(float(os.getenv("MAX_UPLOAD_SIZE_MB", "10")) * 1024 * 1024)
        self.image_repository = ImageRepository()
        self.conversion_repository = ConversionRepository()

    def validate_upload(self, source: bytes, declared_format: str | None = None) -> None:
        if declared_format and not declared_format.lower().startswith("image/"):
            raise ImageDecodeFailed(f"Not an image upload: {declared_format}")
        if not source:
            raise ImageDecodeFailed("Empty image upload")
        if len(source) > self.MAX_UPLOAD_BYTES:
            raise ImageDecodeFailed(
                f"Image is {len(source)} bytes, limit is {self.MAX_UPLOAD_BYTES} bytes"
            )

    @staticmethod
    def _jpeg_filename(filename: str | None) -> str | None:
        if filename is None:
            return None
        path = PurePath(filename)
        if path.suffix.lower() in ConversionRepository.HEIC_SUFFIXES:
            return str(path.with_suffix(".jpg"))
        return filename

    def normalize(
        self,
        source: bytes,
        declared_format: str | None = None,
        filename: str | None = None,
    ) -> DisplayableImage:
        """
        Convert camera-native formats (HEIC/HEIF) to JPEG.

        Args:
            source (bytes): Encoded upload.
            declared_format (str, optional): Media type reported by the client.
            filename (str, optional): Original file name.

        Returns:
            DisplayableImage: converted image backed by a temporary file, or the
            original bytes untouched when no conversion was needed or it failed.
        """
        self.validate_upload(source, declared_format)

        if not self.conversion_repository.is_heic(source, declared_format, filename):
            return DisplayableImage(data=source, media_type=declared_format, filename=filename)

        logger.info(f"HEIC image detected, converting to JPEG: {filename or 'upload'}")
        try:
            jpeg = self.conversion_repository.convert(source, "JPEG", self.JPEG_QUALITY)
        except ConversionFailed as err:
            logger.warning(f"Failed to convert HEIC image, using original: {err}")
            return DisplayableImage(data=source, media_type=declared_format, filename=filename)

        uri = self.image_repository.write_temporary(jpeg, suffix=".jpg")
        logger.info("HEIC converted to JPEG successfully")
        return DisplayableImage(
            data=jpeg,
            media_type="image/jpeg",
            filename=self._jpeg_filename(filename),
            converted=True,
            uri=uri,
        )

    def rasterize(self, handle: DisplayableImage) -> RasterImage:
        """Decode a normalized image. Raises ImageDecodeFailed."""
        return self.image_repository.decode(handle)

    def load(self, path: Union[str, Path], declared_format: str | None = None) -> RasterImage:
        """Read, normalize and decode an image from disk in one go."""
        path = Path(path)
        data = self.image_repository.read_bytes(path)
        with self.normalize(data, declared_format, path.name) as handle:
            return self.rasterize(handle)
