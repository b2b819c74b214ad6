import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlsplit

from plantscan.constants import CONTENT_TYPES, DEFAULT_CONTENT_TYPE, LOCAL_URI_SCHEMES
from plantscan.exceptions import FileUnreadableError, ImageIntegrityError, InvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedImage:
    data: bytes
    content_type: str
    path: Path


def is_valid_image_uri(uri) -> bool:
    return isinstance(uri, str) and uri.startswith(LOCAL_URI_SCHEMES)


def content_type_for(uri: str) -> str:
    """Content type from the file extension, JPEG when unknown."""
    extension = urlsplit(uri).path.lower().rsplit('.', 1)[-1]
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)


class ImageService:
    """
    Reads a locally referenced image and checks it is fit to send.

    ``file://`` URIs point at the local filesystem. ``content://`` and
    ``ph://`` URIs are resolved under ``media_root``.
    """

    def __init__(
        self,
        media_root: Union[str, Path] = "media",
        min_bytes: int = 1024,
        max_bytes: int = 10 * 1024 * 1024,
    ):
        self.media_root = Path(media_root)
        self.min_bytes = min_bytes
        self.max_bytes = max_bytes

    def resolve_path(self, uri: str) -> Path:
        parts = urlsplit(uri)
        path = unquote(parts.path)
        if parts.scheme == "file":
            if parts.netloc and parts.netloc != "localhost":
                path = f"//{parts.netloc}{path}"
            return Path(path)
        return self.media_root / parts.netloc / path.lstrip("/")

    def load(self, uri: str) -> LoadedImage:
        if not uri or not isinstance(uri, str):
            raise InvalidInputError("Invalid image URI provided")
        if not is_valid_image_uri(uri):
            raise InvalidInputError("Image URI must be a local file path (file://, content://, or ph://)")

        path = self.resolve_path(uri)
        if not os.path.isfile(path):
            raise InvalidInputError("Image file does not exist at the provided URI")

        logger.info(f"Reading image file: {uri}")
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.error(f"File reading error: {e}")
            raise FileUnreadableError(f"Failed to read image file: {e.strerror or e}") from e

        if not data:
            raise FileUnreadableError("Failed to read image file - empty result")
        if len(data) < self.min_bytes:
            raise ImageIntegrityError("Image file too small - may be corrupted")
        if len(data) > self.max_bytes:
            raise ImageIntegrityError("Image file too large - please use a smaller image")

        logger.info(f"Image buffer size: {len(data)}")
        return LoadedImage(data=data, content_type=content_type_for(uri), path=path)
