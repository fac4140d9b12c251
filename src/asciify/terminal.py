"""ANSI escape sequences and console helpers."""

import logging
import os
import shutil
from typing import Optional, Tuple

from .color import RGB

LOG = logging.getLogger(__name__)

ESC = "\x1b"
RESET = f"{ESC}[0m"
BOLD = f"{ESC}[1m"


def sgr(*codes: int) -> str:
    return f"{ESC}[{';'.join(str(c) for c in codes)}m"


def fg_rgb(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{ESC}[38;2;{r};{g};{b}m"


def bg_rgb(rgb: RGB) -> str:
    r, g, b = rgb
    return f"{ESC}[48;2;{r};{g};{b}m"


_ansi_enabled = False


def enable_ansi_console() -> bool:
    """Let the console interpret ANSI escapes. Call once, before printing.

    A no-op everywhere except Windows, where Virtual Terminal Processing has
    to be switched on for the output handle. Returns False if that failed,
    in which case colored output will show up as raw escape codes.
    """
    global _ansi_enabled
    if _ansi_enabled or os.name != "nt":
        _ansi_enabled = True
        return True

    import ctypes

    STD_OUTPUT_HANDLE = -11
    ENABLE_PROCESSED_OUTPUT = 0x0001
    ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

    try:
        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        handle = kernel32.GetStdHandle(STD_OUTPUT_HANDLE)
        mode = ctypes.c_uint()
        if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            LOG.debug("stdout is not a console; ANSI mode left unchanged")
            return False
        kernel32.SetConsoleMode(
            handle,
            mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING | ENABLE_PROCESSED_OUTPUT,
        )
    except (AttributeError, OSError) as e:
        LOG.warning("Could not enable ANSI escape processing: %s", e)
        return False

    _ansi_enabled = True
    return True


def terminal_size() -> Optional[Tuple[int, int]]:
    """``(columns, lines)`` of the attached terminal, or None if unknown."""
    cols, lines = shutil.get_terminal_size(fallback=(0, 0))
    if cols <= 0 or lines <= 0:
        return None
    return cols, lines
