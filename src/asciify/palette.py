"""Character palettes: brightness -> glyph."""

from .errors import InvalidConfiguration

# dark -> light
DEFAULT_PALETTE = "   ...',;:clodxkO0KXNWM"


def validate_palette(palette) -> str:
    if not isinstance(palette, str) or len(palette) < 2:
        raise InvalidConfiguration(
            "Palette string must contain at least two characters."
        )
    return palette


def map_char(value: float, palette: str, invert: bool = False) -> str:
    """Pick the palette glyph for a luma ``value``.

    Low values select the start of the palette. The index is clamped, so a
    luma pushed outside [0, 1] by unusual channel weights still lands on the
    first or last glyph.
    """
    if invert:
        value = 1.0 - value
    last = len(palette) - 1
    # half-up like color.round_half_up, inlined for the hot path
    idx = int(value * last + 0.5) if value > 0 else 0
    if idx > last:
        idx = last
    return palette[idx]
