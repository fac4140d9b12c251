"""asciify - Convert images to ASCII art for terminals, HTML, and images."""

__version__ = "0.2.0"

# The reader, printers and raster backend pull in numpy and Pillow. They are
# looked up on first attribute access so `import asciify` stays light and
# `python -m asciify.cli` runs without a pre-imported copy of the module.

_EXPORTS = {
    "ImageAsciiReader": "asciify.reader",
    "Cell": "asciify.reader",
    "Row": "asciify.reader",
    "ReaderConfig": "asciify.config",
    "ResampleFilter": "asciify.config",
    "ConsolePrinter": "asciify.printers",
    "HtmlPrinter": "asciify.printers",
    "ImageRenderer": "asciify.raster",
    "fit_aspect": "asciify.sizing",
    "aspect_height": "asciify.sizing",
    "aspect_width": "asciify.sizing",
    "AsciifyError": "asciify.errors",
    "InvalidConfiguration": "asciify.errors",
    "UnsupportedFilter": "asciify.errors",
    "InvalidImageData": "asciify.errors",
}


def __getattr__(name):
    module_path = _EXPORTS.get(name)
    if module_path is None:
        raise AttributeError(f"module 'asciify' has no attribute {name!r}")
    import importlib

    return getattr(importlib.import_module(module_path), name)


def main(*args, **kwargs):
    from .cli import main as _m

    return _m(*args, **kwargs)


__all__ = ["main", *_EXPORTS]
