"""
Data Types - Image payloads as they flow between canvas nodes.

Images travel through the canvas as strings: either a base64 data-URL
(``data:image/png;base64,...``) or a remote URL. Providers want the
unprefixed base64 text plus its MIME type, which is what ImagePart holds.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import aiohttp
from PIL import Image, UnidentifiedImageError


logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"

_MIME_PATTERN = re.compile(r":(.*?);")


class InvalidImageError(ValueError):
    """Raised when bytes or a file cannot be read as an image."""


class ImageDownloadError(RuntimeError):
    """Raised when a remote image cannot be fetched."""


@dataclass(frozen=True)
class ImagePart:
    """
    An image ready to send to a provider.

    Attributes:
        data: base64 encoded bytes, without the data-URL prefix
        mime_type: e.g. "image/png"
    """
    data: str
    mime_type: str = DEFAULT_MIME_TYPE

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def is_data_url(source: str) -> bool:
    return source.startswith("data:")


def is_remote_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def split_data_url(url: str) -> ImagePart:
    """Split a data-URL into its base64 payload and MIME type."""
    header, _, data = url.partition(",")
    match = _MIME_PATTERN.search(header)
    mime_type = match.group(1) if match and match.group(1) else DEFAULT_MIME_TYPE
    return ImagePart(data=data, mime_type=mime_type)


def to_data_url(part: ImagePart) -> str:
    return f"data:{part.mime_type};base64,{part.data}"


def sniff_mime_type(raw: bytes) -> str | None:
    """Return the MIME type Pillow detects for `raw`, or None if it isn't an image."""
    try:
        with Image.open(BytesIO(raw)) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None


def image_part_from_bytes(raw: bytes, mime_type: str | None = None) -> ImagePart:
    """
    Encode raw image bytes.

    The MIME type is taken from the caller when given, otherwise from
    Pillow's format detection.
    """
    detected = sniff_mime_type(raw)
    if detected is None:
        raise InvalidImageError("Data is not a readable image")
    mime_type = mime_type or detected
    return ImagePart(
        data=base64.b64encode(raw).decode("ascii"),
        mime_type=mime_type,
    )


def file_to_image_part(path: str | Path) -> ImagePart:
    """Read a local image file and encode it for embedding as a data-URL."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    mime_type, _ = mimetypes.guess_type(path.name)
    return image_part_from_bytes(path.read_bytes(), mime_type=mime_type)


async def fetch_remote(url: str) -> tuple[bytes, str]:
    """Download a remote image. Returns the bytes and the reported MIME type."""
    async with aiohttp.ClientSession() as session:
        async with session.get(url) as resp:
            if resp.status >= 400:
                raise ImageDownloadError(f"Failed to fetch image: HTTP {resp.status} {resp.reason}")
            raw = await resp.read()
            mime_type = resp.content_type or sniff_mime_type(raw) or DEFAULT_MIME_TYPE
            return raw, mime_type


async def image_bytes(source: str) -> tuple[bytes, str]:
    """Decode a data-URL or fetch a remote URL into raw bytes and MIME type."""
    if is_data_url(source):
        part = split_data_url(source)
        try:
            return part.to_bytes(), part.mime_type
        except binascii.Error as e:
            raise InvalidImageError(f"Malformed data-URL: {e}") from e
    return await fetch_remote(source)


async def resolve_image_part(source: str) -> ImagePart:
    """Turn any image source held by a node into an ImagePart."""
    if is_data_url(source):
        return split_data_url(source)
    if is_remote_url(source):
        raw, mime_type = await fetch_remote(source)
        return ImagePart(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)
    raise InvalidImageError(f"Unsupported image source: {source[:32]}")


async def download_image(
    source: str,
    destination: str | Path,
) -> bool:
    """
    Export an image from a URL or a base64 data-URL to a file.

    Args:
        source: The image URL or data-URL
        destination: File to write (parent directories are created)

    Returns:
        True if the file was written
    """
    try:
        raw, _ = await image_bytes(source)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(raw)
        return True
    except (InvalidImageError, ImageDownloadError, aiohttp.ClientError, OSError):
        logger.exception("Error during image download")
        return False
