"""
Image optimization for uploaded catalog photos.

Uploads are decoded with Pillow, resized to a fixed box and re-encoded
(WebP by default) before being written under the upload directory.
"""

import io
import secrets
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from catalog.constants import RESPONSIVE_SIZES, THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from catalog.exceptions import ImageProcessingError
from catalog.logging import get_logger

logger = get_logger("images.processor")

PILLOW_FORMATS = {"jpeg": "JPEG", "png": "PNG", "webp": "WEBP"}
FIT_MODES = ("cover", "contain", "fill", "inside")


@dataclass(frozen=True)
class ImageOptions:
    width: int = 1200
    height: int = 800
    quality: int = 85
    format: str = "webp"
    fit: str = "cover"


@dataclass(frozen=True)
class ProcessedImage:
    filename: str
    original_name: str
    file_size: int
    mime_type: str
    width: int
    height: int
    path: Path


def _unique_token() -> str:
    return secrets.token_hex(8)


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Unreadable image: {e}") from e
    return ImageOps.exif_transpose(image)


def _resize(image: Image.Image, width: int, height: int, fit: str) -> Image.Image:
    size = (width, height)
    if fit == "cover":
        return ImageOps.fit(image, size, method=Image.Resampling.LANCZOS)
    if fit == "contain":
        return ImageOps.contain(image, size, method=Image.Resampling.LANCZOS)
    if fit == "fill":
        return image.resize(size, Image.Resampling.LANCZOS)
    # inside: shrink to fit, never enlarge
    resized = image.copy()
    resized.thumbnail(size, Image.Resampling.LANCZOS)
    return resized


def _encode(image: Image.Image, fmt: str, quality: int) -> bytes:
    if fmt == "jpeg" and image.mode != "RGB":
        image = image.convert("RGB")
    elif image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")

    buffer = io.BytesIO()
    save_kwargs = {"quality": quality}
    if fmt == "jpeg":
        save_kwargs.update(optimize=True, progressive=True)
    elif fmt == "png":
        save_kwargs = {"optimize": True}
    image.save(buffer, format=PILLOW_FORMATS[fmt], **save_kwargs)
    return buffer.getvalue()


def _write(
    image: Image.Image,
    output_dir: Path,
    filename: str,
    original_name: str,
    fmt: str,
    quality: int,
) -> ProcessedImage:
    encoded = _encode(image, fmt, quality)
    output_path = output_dir / filename
    output_path.write_bytes(encoded)
    return ProcessedImage(
        filename=filename,
        original_name=original_name,
        file_size=len(encoded),
        mime_type=f"image/{fmt}",
        width=image.width,
        height=image.height,
        path=output_path,
    )


def process_image(
    data: bytes,
    output_dir: str | Path,
    options: ImageOptions | None = None,
    original_name: str = "",
) -> ProcessedImage:
    """
    Resize and re-encode an uploaded image.

    Args:
        data: Raw bytes of the upload.
        output_dir: Directory the processed file is written to (created if missing).
        options: Target box, quality, output format and fit mode.
        original_name: Client-side filename, kept for the image record.

    Returns:
        Metadata of the written file.

    Raises:
        ImageProcessingError: If the bytes are not a decodable image or the
            options are not supported.
    """
    options = options or ImageOptions()
    if options.format not in PILLOW_FORMATS:
        raise ImageProcessingError(f"Unsupported output format: {options.format}")
    if options.fit not in FIT_MODES:
        raise ImageProcessingError(f"Unsupported fit mode: {options.fit}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    image = _resize(_open(data), options.width, options.height, options.fit)
    result = _write(
        image,
        output_dir,
        f"processed-{_unique_token()}.{options.format}",
        original_name,
        options.format,
        options.quality,
    )
    logger.info(
        "image_processed",
        filename=result.filename,
        width=result.width,
        height=result.height,
        file_size=result.file_size,
    )
    return result


def generate_thumbnail(
    data: bytes,
    output_dir: str | Path,
    size: int = THUMBNAIL_SIZE,
    original_name: str = "",
) -> ProcessedImage:
    """Square WebP thumbnail, cropped to cover."""
    options = ImageOptions(width=size, height=size, quality=THUMBNAIL_QUALITY, format="webp")
    return process_image(data, output_dir, options, original_name)


def create_responsive_images(
    data: bytes,
    output_dir: str | Path,
    original_name: str = "",
) -> dict[str, ProcessedImage]:
    """Write one WebP rendition per responsive preset, sharing a filename token."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    source = _open(data)
    token = _unique_token()
    results = {}
    for name, preset in RESPONSIVE_SIZES.items():
        image = _resize(source, preset["width"], preset["height"], "cover")
        results[name] = _write(
            image, output_dir, f"{name}-{token}.webp", original_name, "webp", preset["quality"]
        )
    return results
