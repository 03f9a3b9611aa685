"""
Downscale uploaded product images and inline them as data URIs.

Each image is fitted inside MAX_DIMENSION x MAX_DIMENSION (longest side,
aspect ratio kept), re-encoded as JPEG and returned as
``data:image/jpeg;base64,...`` so it can be stored in a text column.
"""

from __future__ import annotations

import asyncio
import base64
import io
import os
from typing import List, Sequence, Tuple, Union

from PIL import Image, UnidentifiedImageError

from utils.logger import get_logger

_logger = get_logger(__name__)

MAX_DIMENSION = 800
JPEG_QUALITY = 70  # 0.7 on a 0-1 scale

ImageSource = Union[str, os.PathLike, bytes]


class ImageNormalizationError(Exception):
    """A single image could not be normalized."""


class DecodeError(ImageNormalizationError):
    """The input is unreadable or not an image."""


class SurfaceError(ImageNormalizationError):
    """No drawing surface could be allocated for the resized image."""


def target_size(width: int, height: int, limit: int = MAX_DIMENSION) -> Tuple[int, int]:
    """Fit (width, height) inside limit x limit by its longest side.

    Sizes already within the limit are returned unchanged; scaled sizes are
    truncated to whole pixels, never below one.
    """
    w, h = float(width), float(height)
    if w > h:
        if w > limit:
            h *= limit / w
            w = limit
    elif h > limit:
        w *= limit / h
        h = limit
    return max(int(w), 1), max(int(h), 1)


def _read(source: ImageSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        with open(source, "rb") as f:
            return f.read()
    except OSError as e:
        raise DecodeError(f"Could not read {source}: {e}") from e


def _normalize_sync(source: ImageSource) -> str:
    data = _read(source)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Not a readable image: {e}") from e

    size = target_size(img.width, img.height)
    try:
        # JPEG has no alpha: transparent areas land on a white surface
        surface = Image.new("RGB", size, "white")
        layer = img.convert("RGBA")
        if layer.size != size:
            layer = layer.resize(size, Image.Resampling.LANCZOS)
        surface.paste(layer, (0, 0), layer)
    except (MemoryError, ValueError) as e:
        raise SurfaceError(f"Could not draw a {size[0]}x{size[1]} surface: {e}") from e

    buffer = io.BytesIO()
    surface.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{payload}"


async def normalize(source: ImageSource) -> str:
    """Normalize one image (path or raw bytes) into a JPEG data URI.

    Raises DecodeError or SurfaceError; decoding runs in a worker thread.
    """
    return await asyncio.to_thread(_normalize_sync, source)


async def normalize_many(
    sources: Sequence[ImageSource],
) -> Tuple[List[str], List[Tuple[ImageSource, ImageNormalizationError]]]:
    """
    Normalize all sources concurrently.

    Returns (images, failures): the data URIs of the successful inputs in
    input order, and (source, error) pairs for the ones that failed. A bad
    file never stops its siblings.
    """
    results = await asyncio.gather(
        *(normalize(src) for src in sources), return_exceptions=True
    )
    images: List[str] = []
    failures: List[Tuple[ImageSource, ImageNormalizationError]] = []
    for src, res in zip(sources, results):
        if isinstance(res, ImageNormalizationError):
            label = src if not isinstance(src, (bytes, bytearray)) else f"<{len(src)} bytes>"
            _logger.error(f"Error normalizing image {label}: {res}")
            failures.append((src, res))
        elif isinstance(res, BaseException):
            raise res
        else:
            images.append(res)
    return images, failures


def decode_data_uri(uri: str) -> Image.Image:
    """Open a data URI produced by normalize() as a Pillow image."""
    header, _, payload = uri.partition(",")
    if not header.startswith("data:image/") or ";base64" not in header:
        raise DecodeError("Not an inline base64 image")
    return Image.open(io.BytesIO(base64.b64decode(payload)))
