from pathlib import Path
from typing import Union
import io
import logging
import tempfile

import numpy as np
from PIL import Image as PILImage, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener

from models.displayable_image import DisplayableImage
from models.errors import ImageDecodeFailed
from models.image import RasterImage

# Let Pillow open HEIC/HEIF directly when a conversion was skipped or failed
register_heif_opener()

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O and raster decoding for uploaded images.
    Nothing above this layer knows how pixels are decoded.
    """

    @staticmethod
    def read_bytes(path: Union[str, Path]) -> bytes:
        path = Path(path)
        if not path.is_file():
            raise ImageDecodeFailed(f"Image not found or unreadable: {path}")
        return path.read_bytes()

    @staticmethod
    def write_temporary(data: bytes, suffix: str = ".jpg") -> Path:
        """
        Materialise encoded bytes as a temporary file.
        The caller owns the file and must unlink it.
        """
        with tempfile.NamedTemporaryFile(suffix=suffix, prefix="overlay-", delete=False) as tmp:
            tmp.write(data)
        return Path(tmp.name)

    @staticmethod
    def decode(handle: DisplayableImage) -> RasterImage:
        """
        Decode a displayable image into RGBA pixels.
        Reads from the temporary file when one exists, else from memory.
        """
        source = handle.uri if handle.uri is not None else io.BytesIO(handle.data)
        try:
            with PILImage.open(source) as pil_img:
                pil_img = ImageOps.exif_transpose(pil_img)
                arr = np.array(pil_img.convert("RGBA"))
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as err:
            raise ImageDecodeFailed(
                f"Failed to decode image {handle.filename or ''}: {err}".strip()
            ) from err

        if arr.ndim < 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ImageDecodeFailed(f"Decoded image is empty: {handle.filename}")
        logger.debug(f"Decoded {handle.filename or 'upload'} to {arr.shape}")
        return RasterImage(pixels=arr, source=handle.filename)
