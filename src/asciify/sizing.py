"""Output size derivation that preserves the source aspect ratio.

All functions return plain ``(width, height)`` tuples of ints, never smaller
than ``(1, 1)``.
"""

from typing import Tuple

from .color import round_half_up
from .errors import InvalidConfiguration

Size = Tuple[int, int]


def _check_source(source_w: int, source_h: int) -> None:
    if source_w < 1 or source_h < 1:
        raise InvalidConfiguration(
            f"Source dimensions must be positive, got {source_w}x{source_h}"
        )


def fit_aspect(
    source_w: int,
    source_h: int,
    box_w: int,
    box_h: int,
    height_scale: float = 1.0,
) -> Size:
    """Largest aspect-correct size for the source inside ``box_w`` x ``box_h``.

    The constraints are applied one after the other: the size is first
    shrunk to the box width, then the already shrunk height is checked
    against the box height. An image too large on both axes is therefore
    sized by two successive scalings rather than one ``min()`` scale factor.
    Output is reproducible only if this order is kept.

    ``height_scale`` is applied to the final height (0.5 for terminals, whose
    cells are about twice as tall as they are wide).

    >>> fit_aspect(200, 100, 80, 80, 0.5)
    (80, 20)
    """
    _check_source(source_w, source_h)
    x = float(source_w)
    y = float(source_h)

    if x > box_w:
        y = max(y * (box_w / x), 1)
        x = box_w

    if y > box_h:
        x = max(x * (box_h / y), 1)
        y = box_h

    return max(round_half_up(x), 1), max(round_half_up(y * height_scale), 1)


def aspect_height(source_w: int, source_h: int, width: int, height_scale: float = 1.0) -> int:
    _check_source(source_w, source_h)
    ratio = source_h / source_w
    return max(round_half_up(width * ratio * height_scale), 1)


def aspect_width(source_w: int, source_h: int, height: int) -> int:
    _check_source(source_w, source_h)
    ratio = source_w / source_h
    return max(round_half_up(height * ratio), 1)


def fit_terminal(
    source_w: int,
    source_h: int,
    screen_cols: int,
    screen_rows: int,
    height_scale: float = 0.5,
) -> Size:
    """Scale the source so it fills as much of the screen as possible.

    ``screen_rows`` should already exclude any rows the caller wants to keep
    free (the shell prompt, for example).
    """
    _check_source(source_w, source_h)
    if screen_cols < 1 or screen_rows < 1:
        raise InvalidConfiguration(
            f"Screen dimensions must be positive, got {screen_cols}x{screen_rows}"
        )

    img_x = float(source_w)
    img_y = source_h * height_scale

    if screen_cols / screen_rows > img_x / img_y:
        scale = screen_rows / img_y
    else:
        scale = screen_cols / img_x

    return max(round_half_up(img_x * scale), 1), max(round_half_up(img_y * scale), 1)
