"""Image processing for uploads."""

from .processor import (
    ImageOptions,
    ProcessedImage,
    create_responsive_images,
    generate_thumbnail,
    process_image,
)

__all__ = [
    "ImageOptions",
    "ProcessedImage",
    "process_image",
    "generate_thumbnail",
    "create_responsive_images",
]
