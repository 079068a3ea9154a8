"""
Single-image processing for the worker.

Loads the input with Pillow (EXIF orientation applied), runs one filter
with OpenCV and writes the result where the gateway asked for it.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .filters import FilterType, apply_filter

logger = logging.getLogger(__name__)


class FilterError(RuntimeError):
    """Raised when an image can't be read, filtered or written."""
    pass


def load_bgr(image_path: Path) -> np.ndarray:
    """
    Read an image as a contiguous BGR uint8 array.

    Raises FilterError: If the file is missing or not an image
    """
    try:
        with Image.open(image_path) as img:
            img = ImageOps.exif_transpose(img)
            rgb = np.array(img.convert("RGB"), dtype=np.uint8)
    except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
        raise FilterError(f"Could not read image: {image_path}") from e

    return np.ascontiguousarray(cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))


def process_image(input_path: Path, output_path: Path, filter_type: FilterType) -> Path:
    """Filter input_path into output_path and return output_path."""
    img = load_bgr(input_path)
    filtered = apply_filter(img, filter_type)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output_path), filtered):
        raise FilterError(f"Could not write image: {output_path}")

    logger.debug(
        "Applied %s to %s -> %s", filter_type.name.lower(), input_path.name, output_path.name
    )
    return output_path
