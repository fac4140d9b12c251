#!/usr/bin/env python3
"""asciify command line tool."""

import argparse
import logging
import math
import os
import sys
import time
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageColor, UnidentifiedImageError

from . import __version__
from .color import round_half_up
from .config import ReaderConfig, ResampleFilter
from .errors import AsciifyError, InvalidImageData, UnsupportedFilter
from .palette import DEFAULT_PALETTE
from .printers import ConsolePrinter, HtmlPrinter
from .raster import DEFAULT_FONT_SIZE, ImageRenderer, load_font
from .reader import ImageAsciiReader
from .terminal import enable_ansi_console

PROG = "asciify"

LOG = logging.getLogger("asciify")


def setup_logging(debug: bool, log_path: Optional[str] = None) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    LOG.setLevel(logging.DEBUG if (debug or log_path) else level)

    handlers: List[logging.Handler] = []

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handlers.append(sh)

    if log_path:
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(fh)

    LOG.handlers[:] = handlers
    LOG.propagate = False


# -----------------------------
# Argument types
# -----------------------------
def parse_size(value: str) -> Tuple[int, int]:
    """``WxH`` or a single integer used for both dimensions."""
    parts = value.lower().split("x")
    if len(parts) > 2:
        raise argparse.ArgumentTypeError("Size must have one or two components.")
    try:
        dims = [int(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f'Unparsable size "{value}", all dimensions must be integers.'
        ) from None
    if any(d < 1 for d in dims):
        raise argparse.ArgumentTypeError(f'Size "{value}" must be positive.')
    return (dims[0], dims[-1])


def parse_color(value: str) -> Tuple[int, int, int]:
    """CSS color name, ``#hex`` value, or ``R,G,B``."""
    vals = value.split(",")
    try:
        if len(vals) >= 3:
            rgb = tuple(int(v.strip()) for v in vals[:3])
            if any(not 0 <= c <= 255 for c in rgb):
                raise ValueError(value)
            return rgb
        return ImageColor.getrgb(value.strip().lower())[:3]
    except ValueError:
        raise argparse.ArgumentTypeError(f'Unparsable color value: "{value}".') from None


def parse_palette(value: str) -> str:
    if len(value) < 2:
        raise argparse.ArgumentTypeError(
            "Palette string must contain at least two characters."
        )
    return value


def parse_font_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f'Font size must be an integer value, got: "{value}"'
        ) from None
    if size < 1:
        raise argparse.ArgumentTypeError(f"Font size must not be less than 1, was: {size}")
    return size


def parse_positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'Expected an integer, got: "{value}"') from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {number}")
    return number


def parse_weight(value: str) -> float:
    try:
        weight = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'Invalid channel weight: "{value}"') from None
    if not math.isfinite(weight):
        raise argparse.ArgumentTypeError(f"Channel weight must be finite, got {weight}")
    return weight


def parse_filter(value: str) -> ResampleFilter:
    try:
        return ResampleFilter.parse(value)
    except UnsupportedFilter as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_height_scale(value: str) -> float:
    try:
        scale = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'Invalid height scale: "{value}"') from None
    if not scale > 0:
        raise argparse.ArgumentTypeError(f"Height scale must be positive, got {scale}")
    return scale


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=PROG,
        description="Convert an image to ASCII art for the terminal, HTML, or another image.",
    )
    ap.add_argument("input", help="Input image path")
    ap.add_argument(
        "-o", "--output", default=None,
        help="Write text/HTML output to this file (default: stdout)",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--debug", action="store_true", help="Verbose logging to stderr")
    ap.add_argument("--log", dest="log_path", default=None, help="Also log to FILE")

    ap.add_argument(
        "--preserve-aspect", action="store_true",
        help="Preserve the aspect ratio of the original image when --size is used.",
    )
    ap.add_argument(
        "--resample-filter",
        type=parse_filter,
        default=ResampleFilter.SMOOTH,
        metavar="{default,fast,smooth,replicate,area_averaging}",
        help='Filter used when scaling the image (default: "smooth").',
    )

    size = ap.add_argument_group(
        "Size Options", "Options controlling output size. Only one may be given."
    )
    size_x = size.add_mutually_exclusive_group()
    size_x.add_argument(
        "--size", type=parse_size, default=None,
        help="Output size as WxH or a single integer for both. Terminal auto fit is "
        "used if not specified. --html defaults to fitting 128x128 (aspect corrected), "
        "--image-out to the input image size (in pixels).",
    )
    size_x.add_argument("--width", type=parse_positive_int, default=None,
                        help="Output width, height derived from the aspect ratio.")
    size_x.add_argument("--height", type=parse_positive_int, default=None,
                        help="Output height, width derived from the aspect ratio.")
    size.add_argument(
        "--height-scale", type=parse_height_scale, default=0.5,
        help="Height scale for output size calculation (default 0.5, characters are "
        "assumed to be half as wide as they are tall). Ignored by --image-out.",
    )

    ap.add_argument("--flip-x", action="store_true", help="Flip output horizontally.")
    ap.add_argument("--flip-y", action="store_true", help="Flip output vertically.")

    html_g = ap.add_argument_group("HTML Output Options")
    html_g.add_argument("--html", action="store_true", help="Output an HTML5 document.")
    html_g.add_argument(
        "--html-raw", action="store_true",
        help="Output only the art markup, without document/style wrapper.",
    )
    html_g.add_argument("--html-title", default=None, help="Document title.")
    html_g.add_argument("--html-font-weight", default="bold",
                        help="CSS font weight, passed through as-is (default 'bold').")
    html_g.add_argument("--html-font-style", default="normal",
                        help="CSS font style, passed through as-is (default 'normal').")
    html_g.add_argument("--html-font-size", default="8pt",
                        help="CSS font size, passed through as-is (default '8pt').")
    html_g.add_argument("--html-background", default="black",
                        help="CSS page background (default 'black').")
    html_g.add_argument("--html-foreground", default="white",
                        help="CSS default text color (default 'white').")

    img_g = ap.add_argument_group("Image Output Options")
    img_g.add_argument(
        "--image-out", default=None,
        help="Render the art into an image file. --size is then in pixels.",
    )
    img_g.add_argument(
        "--image-out-format", default=None,
        help="Image format, defaults to the output file extension or png.",
    )
    img_g.add_argument("--image-font", default=None,
                       help="Path to a .ttf font (monospace recommended).")
    img_g.add_argument("--image-font-style", choices=["plain", "bold"], default="bold",
                       help="Style used when picking the default font (default bold).")
    img_g.add_argument("--image-font-size", type=parse_font_size, default=DEFAULT_FONT_SIZE,
                       help=f"Font size in points (default {DEFAULT_FONT_SIZE}).")
    img_g.add_argument("--image-background", type=parse_color, default=(0, 0, 0),
                       help="Background color: CSS name, #hex, or R,G,B.")
    img_g.add_argument("--image-foreground", type=parse_color, default=(255, 255, 255),
                       help="Text color when --colors is not used.")

    color_g = ap.add_argument_group("Color/Shading Options")
    color_g.add_argument(
        "--palette", type=parse_palette, default=DEFAULT_PALETTE,
        help="Characters ordered from dark to light.",
    )
    color_g.add_argument("--invert", action="store_true", help="Invert the palette.")
    color_g.add_argument("--colors", action="store_true", help="Colorize output.")
    color_g.add_argument("--fill", action="store_true",
                         help="Fill cell backgrounds when using --colors.")
    color_g.add_argument("--truecolor", action="store_true",
                         help="Use 24-bit terminal colors instead of the basic 8.")
    color_g.add_argument("--grayscale", action="store_true",
                         help="Process the image in grayscale.")
    color_g.add_argument("--red-weight", type=parse_weight, default=0.2989)
    color_g.add_argument("--green-weight", type=parse_weight, default=0.5866)
    color_g.add_argument("--blue-weight", type=parse_weight, default=0.1145)

    return ap


# -----------------------------
# Helpers
# -----------------------------
def load_image(path: str) -> Image.Image:
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except UnidentifiedImageError as e:
        raise InvalidImageData(path) from e


def build_config(args: argparse.Namespace) -> ReaderConfig:
    return ReaderConfig(
        palette=args.palette,
        invert_palette=args.invert,
        grayscale=args.grayscale,
        red_weight=args.red_weight,
        green_weight=args.green_weight,
        blue_weight=args.blue_weight,
        flip_x=args.flip_x,
        flip_y=args.flip_y,
        resample_filter=args.resample_filter,
        height_scale=args.height_scale,
    )


def calc_output_size(
    args: argparse.Namespace, reader: ImageAsciiReader, height_scale: float
) -> Optional[Tuple[int, int]]:
    """Size requested on the command line, or None for the backend default."""
    if args.size is not None and args.preserve_aspect:
        return reader.fit_aspect(args.size[0], args.size[1], height_scale)
    if args.width is not None:
        return args.width, reader.aspect_height(args.width, height_scale)
    if args.height is not None:
        return reader.aspect_width(args.height), max(round_half_up(args.height * height_scale), 1)
    return args.size


def image_format(path: str, override: Optional[str]) -> str:
    """Pillow format name for the output file (png when there is no extension)."""
    if override:
        fmt = override
    else:
        ext = os.path.splitext(path)[1]
        fmt = ext[1:] if ext else "png"
    name = Image.registered_extensions().get("." + fmt.lower(), fmt.upper())
    if name not in Image.SAVE:
        raise ValueError(f'Unknown image output format: "{fmt}"')
    return name


def render_image_out(args: argparse.Namespace, reader: ImageAsciiReader, font) -> None:
    size = calc_output_size(args, reader, 1.0)
    renderer = ImageRenderer(
        reader,
        use_colors=args.colors,
        color_fill=args.fill,
        background=args.image_background,
        foreground=args.image_foreground,
        font=font,
    )
    width, height = size if size is not None else renderer.default_size()
    fmt = image_format(args.image_out, args.image_out_format)

    img = renderer.render(width, height)
    LOG.debug("Saving %dx%d image to %s as %s", width, height, args.image_out, fmt)
    img.save(args.image_out, format=fmt)


def make_printer(args: argparse.Namespace, reader: ImageAsciiReader):
    if args.html:
        return HtmlPrinter(
            reader,
            use_colors=args.colors,
            color_fill=args.fill,
            raw=args.html_raw,
            title=args.html_title,
            font_size=args.html_font_size,
            font_weight=args.html_font_weight,
            font_style=args.html_font_style,
            background=args.html_background,
            foreground=args.html_foreground,
        )

    if args.colors:
        enable_ansi_console()
    return ConsolePrinter(
        reader,
        use_colors=args.colors,
        color_fill=args.fill,
        truecolor=args.truecolor,
    )


# -----------------------------
# main
# -----------------------------
def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    t0 = time.perf_counter()
    setup_logging(args.debug, args.log_path)
    LOG.debug("Args: %s", vars(args))

    try:
        reader = ImageAsciiReader(load_image(args.input), build_config(args))
    except FileNotFoundError as e:
        print(f"File not found: {e}", file=sys.stderr)
        return 3
    except InvalidImageData:
        print("Provided image source contained invalid image data.", file=sys.stderr)
        return 3
    except AsciifyError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error reading from provided image source: {e}", file=sys.stderr)
        return 3

    LOG.debug("Loaded %s: %dx%d", args.input, reader.image_width, reader.image_height)

    if args.image_out:
        try:
            font = load_font(
                args.image_font, args.image_font_size, bold=args.image_font_style == "bold"
            )
        except OSError as e:
            print(f"Could not load font: {e}", file=sys.stderr)
            return 3
        try:
            render_image_out(args, reader, font)
        except AsciifyError as e:
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return 2
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 3
        except OSError as e:
            print(f'IO Error writing to image file "{args.image_out}": {e}', file=sys.stderr)
            return 3
        LOG.debug("Done in %.3fs", time.perf_counter() - t0)
        return 0

    printer = make_printer(args, reader)
    size = calc_output_size(args, reader, args.height_scale)
    LOG.debug("Output size: %s", size if size is not None else "default")

    try:
        if args.output:
            with open(args.output, "w", encoding="utf-8") as out:
                printer.print(out, size)
        else:
            printer.print(sys.stdout, size)
    except AsciifyError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"IO Error while writing output: {e}", file=sys.stderr)
        return 3

    LOG.debug("Done in %.3fs", time.perf_counter() - t0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
