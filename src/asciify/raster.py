"""Render character art back into a raster image."""

import logging
import math
import os
import platform
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .color import RGB, fill_foreground
from .errors import InvalidConfiguration
from .reader import ImageAsciiReader

LOG = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 12

Font = ImageFont.FreeTypeFont


# -----------------------------
# Fonts
# -----------------------------
def find_default_mono_font(bold: bool = False) -> Optional[str]:
    system = platform.system().lower()

    if "darwin" in system:  # macOS
        candidates = [
            "/System/Library/Fonts/Menlo.ttc",
            "/System/Library/Fonts/Monaco.ttf",
            "/Library/Fonts/Courier New Bold.ttf" if bold else "/Library/Fonts/Courier New.ttf",
        ]
    elif "windows" in system:
        windir = os.environ.get("WINDIR", r"C:\Windows")
        candidates = [
            os.path.join(windir, "Fonts", "CONSOLAB.TTF" if bold else "CONSOLA.TTF"),
            os.path.join(windir, "Fonts", "CASCADIAMONO.TTF"),
            os.path.join(windir, "Fonts", "LUCON.TTF"),
        ]
    else:  # Linux and others
        if bold:
            candidates = [
                "/usr/share/fonts/truetype/dejavu/DejaVuSansMono-Bold.ttf",
                "/usr/share/fonts/truetype/liberation/LiberationMono-Bold.ttf",
                "/usr/share/fonts/truetype/noto/NotoSansMono-Bold.ttf",
            ]
        else:
            candidates = []
        candidates += [
            "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
            "/usr/share/fonts/truetype/noto/NotoSansMono-Regular.ttf",
            "/usr/share/fonts/truetype/ubuntu/UbuntuMono-R.ttf",
        ]

    for p in candidates:
        if os.path.exists(p):
            return p
    return None


def load_font(font_path: Optional[str], font_size: int = DEFAULT_FONT_SIZE, bold: bool = True) -> Font:
    """Load a TrueType font, falling back to a system monospace font, then
    to Pillow's bundled default."""
    if font_size < 1:
        raise InvalidConfiguration(f"Font size must not be less than 1, was: {font_size}")

    if font_path:
        LOG.debug("Loading font from %s (size=%d)", font_path, font_size)
        return ImageFont.truetype(font_path, font_size)

    default = find_default_mono_font(bold)
    if default:
        LOG.debug("Falling back to default font %s (size=%d)", default, font_size)
        return ImageFont.truetype(default, font_size)

    LOG.debug("Using PIL default font (size=%d)", font_size)
    return ImageFont.load_default(size=font_size)


def measure_cell(font, palette: str) -> Tuple[int, int]:
    """Pixel size of one character cell: the widest palette glyph by the
    font's line height."""
    width = max(int(math.ceil(font.getlength(ch))) for ch in palette)

    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        height = ascent + descent
    else:
        height = font.getbbox(palette)[3]

    return max(width, 1), max(height, 1)


# -----------------------------
# Renderer
# -----------------------------
class ImageRenderer:
    def __init__(
        self,
        reader: ImageAsciiReader,
        use_colors: bool = False,
        color_fill: bool = False,
        background: RGB = (0, 0, 0),
        foreground: RGB = (255, 255, 255),
        font=None,
    ):
        self.reader = reader
        self.use_colors = use_colors
        self.color_fill = color_fill
        self.background = background
        self.foreground = foreground
        self.font = font

    def default_size(self) -> Tuple[int, int]:
        return self.reader.image_width, self.reader.image_height

    def render(self, width: int, height: int) -> Image.Image:
        """Draw the art into a new ``width`` x ``height`` RGB image.

        The grid gets as many cells as needed to cover the whole image
        (rounding up), and is shifted back by half the overflow on each axis
        so the clipped part is split evenly between opposite edges.
        """
        if width < 1 or height < 1:
            raise InvalidConfiguration(
                f"Output dimensions must be positive, got {width}x{height}"
            )

        if self.font is None:
            self.font = load_font(None)
        font = self.font

        cell_w, cell_h = measure_cell(font, self.reader.palette)
        cols = int(math.ceil(width / cell_w))
        rows = int(math.ceil(height / cell_h))

        off_x = int(math.floor((width - cols * cell_w) * 0.5 + 0.5))
        off_y = int(math.floor((height - rows * cell_h) * 0.5 + 0.5))

        LOG.debug(
            "Rendering %dx%d cells of %dx%d px into %dx%d image",
            cols, rows, cell_w, cell_h, width, height,
        )

        img = Image.new("RGB", (width, height), tuple(self.background))
        draw = ImageDraw.Draw(img)
        grayscale = self.reader.config.grayscale

        for row in self.reader.read(cols, rows):
            top = off_y + row.index * cell_h
            left = off_x
            for cell in row:
                fg = self.foreground
                if self.use_colors:
                    fg = cell.color
                    if self.color_fill:
                        draw.rectangle(
                            [left, top, left + cell_w - 1, top + cell_h - 1],
                            fill=cell.color,
                        )
                        fg = fill_foreground(cell.color, cell.luma, grayscale)
                draw.text((left, top), cell.char, fill=tuple(fg), font=font)
                left += cell_w

        return img
