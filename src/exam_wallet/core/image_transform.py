"""
image_transform.py: Resize, crop, convert and shrink raster images held in memory.

Every operation validates the input type, decodes it into a Pillow surface at its
natural size, draws, and re-encodes at the requested quality (0..1, ignored for PNG).
Pillow work runs in the default executor so callers on the event loop stay responsive.

Supported inputs: JPEG (image/jpg is accepted as an alias), PNG and WEBP.
"""

import asyncio
import base64
import functools
import io
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar, Union

from PIL import Image, ImageOps

from ..utils.log_utils import get_logger
from .errors import DecodeError, EncodeError, UnsupportedEnvironmentError, UnsupportedMediaTypeError, ValidationError
from .files import (
    IMAGE_MAX_DIMENSION,
    IMAGE_PREVIEW_DIMENSION,
    SUPPORTED_IMAGE_TYPES,
    ProcessedFile,
    UploadedFile,
    is_image,
)

logger = get_logger(__name__)

T = TypeVar("T")

# media type -> Pillow format name
PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

# target format -> (media type, file extension)
TARGET_FORMATS = {
    "jpeg": ("image/jpeg", ".jpg"),
    "jpg": ("image/jpeg", ".jpg"),
    "png": ("image/png", ".png"),
    "webp": ("image/webp", ".webp"),
}

LOSSLESS_TO_LOSSY_THRESHOLD = 2 * 1024 * 1024
LARGE_SOURCE_THRESHOLD = 5 * 1024 * 1024
REDUCE_START_WIDTH = 2000
REDUCE_START_WIDTH_LARGE = 1600
REDUCE_MIN_WIDTH = 800
REDUCE_WIDTH_STEP = 200
REDUCE_QUALITIES = tuple(round(0.9 - 0.1 * i, 1) for i in range(7))  # 0.9 .. 0.3


@dataclass(frozen=True)
class CropRegion:
    """Rectangle in source-pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    def as_box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class ReductionResult:
    """Outcome of reduce_to_target_size.

    `budget_met` is False when the search exhausted its quality and width floors
    without reaching the target; `file` is then the smallest result obtained.
    """
    file: Union[UploadedFile, ProcessedFile]
    budget_met: bool
    attempts: int


async def _run_blocking(func: Callable[..., T], *args) -> T:
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


def _check_image(file: UploadedFile) -> None:
    if file.media_type not in SUPPORTED_IMAGE_TYPES:
        raise UnsupportedMediaTypeError(f"Not an image file: {file.media_type}")


def _check_quality(quality: float) -> None:
    if not 0.0 <= quality <= 1.0:
        raise ValidationError(f"Quality must be between 0 and 1, got {quality}")


def _decode(content: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(content))
        img.load()
    except (OSError, ValueError, Image.DecompressionBombError) as err:
        logger.debug("Decoding failed: %s", err)
        raise DecodeError() from err
    # draw as displayed, not as stored
    return ImageOps.exif_transpose(img)


def _encode(img: Image.Image, media_type: str, quality: float) -> bytes:
    fmt = PIL_FORMATS[media_type]
    params = {}
    if fmt == "JPEG":
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        params["quality"] = max(1, min(100, int(round(quality * 100))))
    elif fmt == "WEBP":
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        params["quality"] = max(1, min(100, int(round(quality * 100))))
    elif img.mode not in ("1", "L", "LA", "I", "P", "RGB", "RGBA"):
        img = img.convert("RGB")

    buffer = io.BytesIO()
    try:
        img.save(buffer, format=fmt, **params)
    except (OSError, ValueError, KeyError) as err:
        logger.debug("Encoding to %s failed: %s", fmt, err)
        raise EncodeError() from err
    data = buffer.getvalue()
    if not data:
        raise EncodeError()
    return data


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale (width, height) down to fit the bounds, keeping the aspect ratio.

    Images that already fit are returned unchanged; nothing is upscaled.
    """
    if width <= max_width and height <= max_height:
        return width, height
    scale = min(max_width / width, max_height / height)
    new_w = min(max_width, max(1, int(width * scale + 0.5)))
    new_h = min(max_height, max(1, int(height * scale + 0.5)))
    return new_w, new_h


def _with_extension(file: UploadedFile, extension: str) -> str:
    return f"{file.stem}{extension}"


def _resize_sync(file: UploadedFile, max_width: int, max_height: int, quality: float) -> ProcessedFile:
    img = _decode(file.content)
    width, height = fit_dimensions(img.width, img.height, max_width, max_height)

    output_type = file.media_type
    name = file.name
    if PIL_FORMATS[file.media_type] == "PNG" and file.size > LOSSLESS_TO_LOSSY_THRESHOLD:
        output_type = "image/jpeg"
        name = _with_extension(file, ".jpg")

    if (width, height) != img.size:
        img = img.resize((width, height), resample=Image.Resampling.LANCZOS)
    content = _encode(img, output_type, quality)
    logger.debug("Resized %s to %dx%d (%s, %d bytes)", file.name, width, height, output_type, len(content))
    return ProcessedFile(content=content, media_type=output_type, name=name)


def _crop_sync(file: UploadedFile, region: CropRegion, quality: float) -> ProcessedFile:
    img = _decode(file.content)
    if (region.x < 0 or region.y < 0 or region.width <= 0 or region.height <= 0
            or region.x + region.width > img.width or region.y + region.height > img.height):
        raise ValidationError(f"Crop region {region} is outside the {img.width}x{img.height} image")

    cropped = img.crop(region.as_box())
    content = _encode(cropped, file.media_type, quality)
    name = f"{file.stem}_cropped{file.extension}"
    return ProcessedFile(content=content, media_type=file.media_type, name=name)


def _convert_sync(file: UploadedFile, media_type: str, extension: str, quality: float) -> ProcessedFile:
    img = _decode(file.content)
    content = _encode(img, media_type, quality)
    return ProcessedFile(content=content, media_type=media_type, name=_with_extension(file, extension))


def _natural_size(content: bytes) -> Tuple[int, int]:
    return _decode(content).size


def _thumbnail_sync(file: UploadedFile, size: int) -> str:
    img = _decode(file.content)
    if img.width > img.height:
        dims = (size, max(1, round(img.height * size / img.width)))
    else:
        dims = (max(1, round(img.width * size / img.height)), size)
    img = img.resize(dims, resample=Image.Resampling.LANCZOS)
    b64 = base64.b64encode(_encode(img, "image/jpeg", 0.7)).decode("ascii")
    return f"data:image/jpeg;base64,{b64}"


async def resize_image(
    file: UploadedFile,
    max_width: int = IMAGE_MAX_DIMENSION,
    max_height: int = IMAGE_MAX_DIMENSION,
    quality: float = 0.8,
) -> ProcessedFile:
    """Resize an image to fit within max_width x max_height, keeping its aspect ratio.

    PNG sources larger than 2 MiB are always re-encoded as JPEG.

    Raises:
        UnsupportedMediaTypeError: if the file is not a supported image.
        DecodeError: if the image cannot be loaded.
        EncodeError: if no output was produced.
    """
    _check_image(file)
    _check_quality(quality)
    if max_width <= 0 or max_height <= 0:
        raise ValidationError("Target dimensions must be positive")
    return await _run_blocking(_resize_sync, file, max_width, max_height, quality)


async def crop_image(file: UploadedFile, region: CropRegion, quality: float = 0.8) -> ProcessedFile:
    """Cut `region` out of the image, keeping its media type. The result is named `<stem>_cropped<ext>`."""
    _check_image(file)
    _check_quality(quality)
    return await _run_blocking(_crop_sync, file, region, quality)


async def convert_image_format(file: UploadedFile, target_format: str, quality: float = 0.8) -> ProcessedFile:
    """Re-encode the image as jpeg, png or webp and swap the file extension to match."""
    _check_image(file)
    _check_quality(quality)
    try:
        media_type, extension = TARGET_FORMATS[target_format.lower()]
    except KeyError:
        raise ValidationError(f"Unsupported output format: {target_format}")
    return await _run_blocking(_convert_sync, file, media_type, extension, quality)


async def generate_image_thumbnail(file: UploadedFile, size: int = IMAGE_PREVIEW_DIMENSION) -> str:
    """Return a JPEG data URL whose longest side is `size` pixels."""
    _check_image(file)
    return await _run_blocking(_thumbnail_sync, file, size)


async def reduce_to_target_size(file: UploadedFile, target_size_bytes: int) -> ReductionResult:
    """Shrink an image until it fits in `target_size_bytes`, best effort.

    For each width (2000px, or 1600px for sources over 5 MiB, stepping down by 200px
    to 800px) qualities 0.9 down to 0.3 are tried. The first result within budget is
    returned; otherwise the smallest result seen, which is never larger than the input.

    Raises:
        UnsupportedEnvironmentError: for non-image files that exceed the target.
    """
    if file.size <= target_size_bytes:
        return ReductionResult(file=file, budget_met=True, attempts=0)
    if not is_image(file):
        raise UnsupportedEnvironmentError(
            "Size reduction for non-image files is not supported in this environment"
        )

    src_width, src_height = await _run_blocking(_natural_size, file.content)
    start_width = REDUCE_START_WIDTH_LARGE if file.size > LARGE_SOURCE_THRESHOLD else REDUCE_START_WIDTH

    best: Optional[ProcessedFile] = None
    attempts = 0
    tried = set()
    for width in range(start_width, REDUCE_MIN_WIDTH - 1, -REDUCE_WIDTH_STEP):
        height = max(1, round(src_height * width / src_width))
        dims = fit_dimensions(src_width, src_height, width, height)
        if dims in tried:
            continue
        tried.add(dims)

        for quality in REDUCE_QUALITIES:
            candidate = await resize_image(file, width, height, quality)
            attempts += 1
            if best is None or candidate.size < best.size:
                best = candidate
            if candidate.size <= target_size_bytes:
                logger.info("Reduced %s to %d bytes in %d attempts", file.name, candidate.size, attempts)
                return ReductionResult(file=candidate, budget_met=True, attempts=attempts)
            if PIL_FORMATS[candidate.media_type] == "PNG":
                # quality has no effect on PNG output
                break

    logger.info("Could not reduce %s below %d bytes after %d attempts", file.name, target_size_bytes, attempts)
    if best is None or best.size > file.size:
        return ReductionResult(file=file, budget_met=False, attempts=attempts)
    return ReductionResult(file=best, budget_met=False, attempts=attempts)
