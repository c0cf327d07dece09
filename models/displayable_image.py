from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


@dataclass
class DisplayableImage:
    """
    Output of format normalization.

    Holds the (possibly converted) encoded bytes. When a conversion happened
    the bytes are also materialised as a temporary file (``uri``) that
    decoders can open; use the object as a context manager so that file is
    released once the raster has been extracted.
    """
    data: bytes
    media_type: str | None = None
    filename: str | None = None
    converted: bool = False
    uri: Path | None = None  # temporary decodable file, owned by this handle

    def release(self) -> None:
        if self.uri is None:
            return
        try:
            self.uri.unlink()
        except FileNotFoundError:
            pass
        logger.debug(f"Released temporary image {self.uri}")
        self.uri = None

    def __enter__(self) -> "DisplayableImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
