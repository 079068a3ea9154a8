"""
Image filters applied by the worker.

Every filter takes a BGR uint8 image and returns a new uint8 image. Filters
that drop colour return a single-channel image.
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Callable

import cv2
import numpy as np

logger = logging.getLogger(__name__)

CARTOON_LEVELS = 8
RETRO_NOISE_MEAN = 30.0
RETRO_NOISE_STDDEV = 30.0


class FilterType(enum.IntEnum):
    GRAYSCALE = 0
    EDGE = 1
    CARTOON = 2
    RETRO = 3


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_mode(mode: str) -> FilterType:
    """
    Map a mode string to a filter.

    Accepts a filter name ("edge") or number ("1"). A leading integer is
    honoured ("2abc" -> CARTOON); anything unrecognised means GRAYSCALE.
    """
    name = mode.strip().upper()
    if name in FilterType.__members__:
        return FilterType[name]

    match = _LEADING_INT.match(mode)
    if match:
        try:
            return FilterType(int(match.group(1)))
        except ValueError:
            pass
    logger.debug("Unknown mode %r, using grayscale", mode)
    return FilterType.GRAYSCALE


def grayscale(img: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)


def edge(img: np.ndarray) -> np.ndarray:
    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    return cv2.Canny(gray, 10, 100, apertureSize=3)


def cartoon(img: np.ndarray) -> np.ndarray:
    """Posterize to CARTOON_LEVELS per channel, then darken the edges."""
    edges = cv2.cvtColor(edge(img), cv2.COLOR_GRAY2BGR)
    step = CARTOON_LEVELS
    posterized = (img // step) * step + step // 2
    return cv2.subtract(posterized.astype(np.uint8), edges)


def retro(img: np.ndarray, rng: np.random.Generator | None = None) -> np.ndarray:
    """Blurred grayscale with a bright Gaussian grain."""
    rng = rng or np.random.default_rng()
    gray = cv2.blur(cv2.cvtColor(img, cv2.COLOR_BGR2GRAY), (3, 3))
    noise = rng.normal(RETRO_NOISE_MEAN, RETRO_NOISE_STDDEV, gray.shape)
    noise = np.clip(noise, 0, 255).astype(np.uint8)
    return cv2.add(gray, noise)


FILTERS: dict[FilterType, Callable[[np.ndarray], np.ndarray]] = {
    FilterType.GRAYSCALE: grayscale,
    FilterType.EDGE: edge,
    FilterType.CARTOON: cartoon,
    FilterType.RETRO: retro,
}


def apply_filter(img: np.ndarray, filter_type: FilterType) -> np.ndarray:
    return FILTERS[filter_type](img)
