"""
SmartFilter image filters.

This package is the image-processing side of the reference worker.
It is used only by workers.

This package has no networking dependencies. It's pure image processing.

"""

from .filters import FilterType, apply_filter, cartoon, edge, grayscale, parse_mode, retro
from .process import FilterError, load_bgr, process_image

__all__ = [
    "FilterType",
    "parse_mode",
    "grayscale",
    "edge",
    "cartoon",
    "retro",
    "apply_filter",
    "FilterError",
    "load_bgr",
    "process_image",
]
