"""Brightness (luma) math, color-fill dimming and 8-color terminal quantization."""

import math
from enum import Enum
from typing import Tuple

RGB = Tuple[int, int, int]
Weights = Tuple[float, float, float]

DEFAULT_WEIGHTS: Weights = (0.2989, 0.5866, 0.1145)

# Quantizer thresholds (channel bytes).
_T = 25.5
_I = 255 - _T


def round_half_up(value: float) -> int:
    """Round .5 away from zero (``round()`` would pick the even neighbour)."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def clamp_unit(value: float) -> float:
    # NaN fails both comparisons and ends up as 0
    if value > 1.0:
        return 1.0
    return value if value >= 0.0 else 0.0


def luma(rgb: RGB, weights: Weights = DEFAULT_WEIGHTS) -> float:
    """Weighted brightness of ``rgb``.

    Each channel contributes ``weight * channel / 255``. The sum is not
    clamped: weights are user supplied and need not add up to 1, so callers
    that need a value in [0, 1] should pass the result through
    :func:`clamp_unit`.
    """
    r, g, b = rgb
    wr, wg, wb = weights
    return (wr * r) / 255 + (wg * g) / 255 + (wb * b) / 255


def grayscale(rgb: RGB, weights: Weights = DEFAULT_WEIGHTS) -> RGB:
    grey = round_half_up(clamp_unit(luma(rgb, weights)) * 255)
    return grey, grey, grey


def fill_foreground(rgb: RGB, value: float, use_grayscale: bool) -> RGB:
    """Glyph color for color-fill mode.

    The cell background is painted with ``rgb`` itself, so the glyph is
    darkened by its own luma (or by half for grayscale output) to stay
    readable on top of it.
    """
    factor = 0.5 if use_grayscale else value
    r, g, b = rgb
    return (
        round_half_up(r * factor),
        round_half_up(g * factor),
        round_half_up(b * factor),
    )


def to_hex(rgb: RGB) -> str:
    return "#%02x%02x%02x" % tuple(rgb)


class TerminalColor(Enum):
    """The basic ANSI palette. Values are SGR color indexes."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    DEFAULT = 9

    @property
    def fg(self) -> int:
        return 30 + self.value

    @property
    def bg(self) -> int:
        return 40 + self.value


def quantize(rgb: RGB, value: float, use_grayscale: bool = False) -> Tuple[TerminalColor, bool]:
    """Classify a cell into one of the 8 terminal colors plus a bold flag.

    This is an ordered threshold heuristic, not a nearest-color search; the
    first matching rule wins. ``value`` is the cell luma in [0, 1].
    """
    r, g, b = (int(c) for c in rgb)

    if use_grayscale:
        if value > 0.7:
            return TerminalColor.WHITE, True
        return TerminalColor.DEFAULT, False

    bold = value >= 0.95 and r < 1 and g < 1 and b < 1

    if r - _T > g and r - _T > b:
        color = TerminalColor.RED
    elif g - _T > r and g - _T > b:
        color = TerminalColor.GREEN
    elif r - _T > b and g - _T > b and r + g > _I:
        color = TerminalColor.YELLOW
    elif b - _T > r and b - _T > g and value < 0.95:
        color = TerminalColor.BLUE
    elif r - _T > g and b - _T > g and r + b > _I:
        color = TerminalColor.MAGENTA
    elif g - _T > r and b - _T > r and b + g > _I:
        color = TerminalColor.CYAN
    elif r + g + b >= 3.0 * value * 255:
        color = TerminalColor.WHITE
    else:
        color = TerminalColor.DEFAULT

    return color, bold
