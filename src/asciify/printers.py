"""Text backends: terminal (plain / ANSI) and HTML.

Both printers are cell formatters: they turn one :class:`~asciify.reader.Cell`
into a string and say how a row ends. :func:`render_rows` is the single row
walk they share.
"""

import html
import logging
import sys
from typing import Iterable, Iterator, Optional, Protocol, TextIO

from .color import fill_foreground, quantize, to_hex, TerminalColor
from .reader import Cell, ImageAsciiReader
from .sizing import Size, fit_terminal
from .terminal import BOLD, RESET, bg_rgb, fg_rgb, sgr, terminal_size

LOG = logging.getLogger(__name__)


class CellFormatter(Protocol):
    def format_cell(self, cell: Cell) -> str: ...

    def line_break(self) -> str: ...


def render_rows(
    reader: ImageAsciiReader, cols: int, rows: int, formatter: CellFormatter
) -> Iterator[str]:
    """Yield one formatted string per row, each ending with the line break."""
    for row in reader.read(cols, rows):
        yield "".join([formatter.format_cell(cell) for cell in row]) + formatter.line_break()


def write_rows(lines: Iterable[str], out: TextIO) -> None:
    for line in lines:
        out.write(line)


class _Printer:
    """State shared by the text printers (reader, size defaults, color flags)."""

    # box the output is fitted into when no size is requested
    default_box = (80, 80)

    def __init__(
        self,
        reader: ImageAsciiReader,
        use_colors: bool = False,
        color_fill: bool = False,
        height_scale: Optional[float] = None,
    ):
        self.reader = reader
        self.use_colors = use_colors
        self.color_fill = color_fill
        self.height_scale = height_scale

    @property
    def effective_height_scale(self) -> float:
        if self.height_scale is None:
            return self.reader.config.height_scale
        return self.height_scale

    def default_size(self) -> Size:
        box_w, box_h = self.default_box
        return self.reader.fit_aspect(box_w, box_h, self.effective_height_scale)


class ConsolePrinter(_Printer):
    """Plain or ANSI-colored text for a terminal.

    Without ``truecolor`` colors are approximated with the 8 basic terminal
    colors (see :func:`asciify.color.quantize`). Call
    :func:`asciify.terminal.enable_ansi_console` once before printing colors.
    """

    def __init__(
        self,
        reader: ImageAsciiReader,
        use_colors: bool = False,
        color_fill: bool = False,
        truecolor: bool = False,
        height_scale: Optional[float] = None,
    ):
        super().__init__(reader, use_colors, color_fill, height_scale)
        self.truecolor = truecolor

    def default_size(self) -> Size:
        screen = terminal_size()
        # one row stays free for the prompt
        if screen is None or screen[1] - 1 < 1:
            LOG.debug("Terminal size unavailable, fitting into %s", self.default_box)
            return super().default_size()

        cols, lines = screen
        return fit_terminal(
            self.reader.image_width,
            self.reader.image_height,
            cols,
            lines - 1,
            self.effective_height_scale,
        )

    def format_cell(self, cell: Cell) -> str:
        if not self.use_colors:
            return cell.char
        if self.truecolor:
            return self._format_truecolor(cell)
        return self._format_quantized(cell)

    def line_break(self) -> str:
        return "\n"

    def _format_truecolor(self, cell: Cell) -> str:
        if self.color_fill:
            fg = fill_foreground(cell.color, cell.luma, self.reader.config.grayscale)
            return f"{bg_rgb(cell.color)}{fg_rgb(fg)}{cell.char}{RESET}"
        return f"{fg_rgb(cell.color)}{cell.char}{RESET}"

    def _format_quantized(self, cell: Cell) -> str:
        color, bold = quantize(cell.color, cell.luma, self.reader.config.grayscale)

        # bold is only shown on its own, with the default color
        if color is TerminalColor.DEFAULT:
            return f"{BOLD if bold else ''}{cell.char}{RESET}"

        code = color.bg if self.color_fill else color.fg
        return f"{sgr(code)}{cell.char}{RESET}"

    def render_lines(self, cols: int, rows: int) -> Iterator[str]:
        return render_rows(self.reader, cols, rows, self)

    def print(self, out: Optional[TextIO] = None, size: Optional[Size] = None) -> None:
        out = out if out is not None else sys.stdout
        cols, rows = size if size is not None else self.default_size()
        LOG.debug("Printing %dx%d text (colors=%s)", cols, rows, self.use_colors)
        write_rows(self.render_lines(cols, rows), out)
        out.flush()


class HtmlPrinter(_Printer):
    """HTML5 output, either a complete document or a raw fragment.

    The CSS values (``font_size``, ``background``...) are inserted verbatim.
    """

    default_box = (128, 128)

    def __init__(
        self,
        reader: ImageAsciiReader,
        use_colors: bool = False,
        color_fill: bool = False,
        raw: bool = False,
        title: Optional[str] = None,
        font_size: str = "8pt",
        font_weight: str = "bold",
        font_style: str = "normal",
        background: str = "black",
        foreground: str = "white",
        height_scale: Optional[float] = None,
    ):
        super().__init__(reader, use_colors, color_fill, height_scale)
        self.raw = raw
        self.title = title
        self.font_size = font_size
        self.font_weight = font_weight
        self.font_style = font_style
        self.background = background
        self.foreground = foreground

    def cell_style(self, cell: Cell) -> str:
        if self.color_fill:
            fg = fill_foreground(cell.color, cell.luma, self.reader.config.grayscale)
            return f"color:{to_hex(fg)}; background-color:{to_hex(cell.color)}"
        return f"color:{to_hex(cell.color)}"

    def format_cell(self, cell: Cell) -> str:
        ch = html.escape(cell.char)
        if not self.use_colors:
            return ch
        return f'<span style="{self.cell_style(cell)}">{ch}</span>'

    def line_break(self) -> str:
        return "<br>"

    def stylesheet(self) -> str:
        return (
            f"body{{background:{self.background}}}"
            ".ascii{"
            f"font-weight:{self.font_weight};"
            f"font-style:{self.font_style};"
            f"font-size:{self.font_size};"
            "font-family:monospace;"
            f"color:{self.foreground}"
            "}"
        )

    def render(self, cols: int, rows: int) -> str:
        body = "".join(render_rows(self.reader, cols, rows, self))
        if self.raw:
            return body

        title = f"<title>{html.escape(self.title)}</title>\n" if self.title is not None else ""
        return (
            "<!DOCTYPE html>\n"
            "<html>\n<head>\n"
            '<meta charset="utf-8">\n'
            f"{title}"
            f"<style>{self.stylesheet()}</style>\n"
            "</head>\n<body>\n"
            f'<pre class="ascii">{body}</pre>\n'
            "</body>\n</html>\n"
        )

    def print(self, out: Optional[TextIO] = None, size: Optional[Size] = None) -> None:
        out = out if out is not None else sys.stdout
        cols, rows = size if size is not None else self.default_size()
        LOG.debug("Printing %dx%d HTML (raw=%s, colors=%s)", cols, rows, self.raw, self.use_colors)
        out.write(self.render(cols, rows))
        out.flush()
