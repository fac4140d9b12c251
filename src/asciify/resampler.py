"""Resize the source image to the output character grid."""

import logging
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .config import ResampleFilter
from .errors import InvalidConfiguration

LOG = logging.getLogger(__name__)

# (rows, cols, 3) uint8, one pixel per output cell
WorkingBitmap = np.ndarray
ResampleState = Optional[Tuple[Tuple[int, int], WorkingBitmap]]


def check_dimensions(cols: int, rows: int) -> None:
    if cols < 1 or rows < 1:
        raise InvalidConfiguration(
            f"Output dimensions must be positive, got {cols}x{rows}"
        )


def resample(
    source: Image.Image,
    cols: int,
    rows: int,
    resample_filter: ResampleFilter = ResampleFilter.SMOOTH,
) -> WorkingBitmap:
    """Return a ``cols`` x ``rows`` RGB copy of ``source`` as a numpy array.

    Exact pixel values depend on the filter and the Pillow build; only the
    dimensions are guaranteed.
    """
    check_dimensions(cols, rows)
    resample_filter = ResampleFilter.parse(resample_filter)

    LOG.debug(
        "Resampling %dx%d -> %dx%d (%s)",
        source.width, source.height, cols, rows, resample_filter.value,
    )

    pillow_filter = resample_filter.pillow_filter
    if pillow_filter is None:
        img = source.resize((cols, rows))
    else:
        img = source.resize((cols, rows), resample=pillow_filter)

    if img.mode != "RGB":
        img = img.convert("RGB")
    return np.asarray(img, dtype=np.uint8)


def ensure_resampled(
    state: ResampleState,
    source: Image.Image,
    cols: int,
    rows: int,
    resample_filter: ResampleFilter = ResampleFilter.SMOOTH,
) -> Tuple[ResampleState, WorkingBitmap]:
    """Single-slot memo around :func:`resample` keyed on ``(cols, rows)``.

    Returns the (possibly unchanged) state and the bitmap to sample from.
    """
    if state is not None and state[0] == (cols, rows):
        LOG.debug("Reusing %dx%d working bitmap", cols, rows)
        return state, state[1]

    bitmap = resample(source, cols, rows, resample_filter)
    return ((cols, rows), bitmap), bitmap
