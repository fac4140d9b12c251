"""Sample an image as a grid of character cells.

:class:`ImageAsciiReader` owns the source image and a single cached working
bitmap sized to the last requested grid. :meth:`ImageAsciiReader.read`
returns lightweight :class:`Row` objects whose cells are computed on demand,
so every renderer pulls exactly the cells it writes.
"""

import logging
from typing import Iterator, NamedTuple, Optional, Tuple

from PIL import Image

from . import sizing
from .color import RGB, clamp_unit, grayscale, luma
from .config import ReaderConfig
from .errors import InvalidConfiguration
from .palette import map_char
from .resampler import ResampleState, check_dimensions, ensure_resampled

LOG = logging.getLogger(__name__)


class Cell(NamedTuple):
    coord: Tuple[int, int]
    color: RGB
    luma: float
    char: str


class Row:
    """One scanline of cells.

    Holds only the reader and the row index, so it can be iterated any
    number of times. It reads from whatever working bitmap the reader holds
    at iteration time: consume it before asking the reader for a different
    grid size.
    """

    __slots__ = ("_reader", "_index", "_cols")

    def __init__(self, reader: "ImageAsciiReader", index: int, cols: int):
        self._reader = reader
        self._index = index
        self._cols = cols

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return self._cols

    def __iter__(self) -> Iterator[Cell]:
        get_pixel = self._reader.get_pixel
        y = self._index
        for x in range(self._cols):
            yield get_pixel(x, y)

    def __repr__(self) -> str:
        return f"Row(index={self._index}, cols={self._cols})"


class Rows:
    """The sequence returned by :meth:`ImageAsciiReader.read`."""

    __slots__ = ("_reader", "_cols", "_rows")

    def __init__(self, reader: "ImageAsciiReader", cols: int, rows: int):
        self._reader = reader
        self._cols = cols
        self._rows = rows

    def __len__(self) -> int:
        return self._rows

    def __getitem__(self, index: int) -> Row:
        if index < 0:
            index += self._rows
        if not 0 <= index < self._rows:
            raise IndexError("row index out of range")
        return Row(self._reader, index, self._cols)

    def __iter__(self) -> Iterator[Row]:
        for y in range(self._rows):
            yield Row(self._reader, y, self._cols)


class ImageAsciiReader:
    """Turns a decoded image into rows of :class:`Cell` values.

    Not thread safe: the working bitmap cache is a plain attribute.
    """

    def __init__(self, image: Image.Image, config: Optional[ReaderConfig] = None):
        if image is None:
            raise InvalidConfiguration("image is required")
        if image.width < 1 or image.height < 1:
            raise InvalidConfiguration(
                f"Image dimensions must be positive, got {image.width}x{image.height}"
            )
        self._image = image if image.mode == "RGB" else image.convert("RGB")
        self._config = config if config is not None else ReaderConfig()
        self._work: ResampleState = None

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def config(self) -> ReaderConfig:
        return self._config

    @property
    def palette(self) -> str:
        return self._config.palette

    @property
    def image_width(self) -> int:
        return self._image.width

    @property
    def image_height(self) -> int:
        return self._image.height

    @property
    def work_size(self) -> Optional[Tuple[int, int]]:
        return None if self._work is None else self._work[0]

    # -----------------------------
    # Sizing
    # -----------------------------

    def fit_aspect(self, box_w: int, box_h: int, height_scale: float = 1.0) -> sizing.Size:
        return sizing.fit_aspect(
            self.image_width, self.image_height, box_w, box_h, height_scale
        )

    def aspect_height(self, width: int, height_scale: float = 1.0) -> int:
        return sizing.aspect_height(
            self.image_width, self.image_height, width, height_scale
        )

    def aspect_width(self, height: int) -> int:
        return sizing.aspect_width(self.image_width, self.image_height, height)

    # -----------------------------
    # Sampling
    # -----------------------------

    def read(self, cols: int, rows: int) -> Rows:
        """Prepare a ``cols`` x ``rows`` grid and return its rows.

        The image is resampled only when the grid size differs from the
        previous call.
        """
        check_dimensions(cols, rows)
        self._work, _ = ensure_resampled(
            self._work, self._image, cols, rows, self._config.resample_filter
        )
        return Rows(self, cols, rows)

    def get_pixel(self, x: int, y: int) -> Cell:
        if self._work is None:
            raise RuntimeError("read() must be called before get_pixel()")

        cfg = self._config
        bitmap = self._work[1]
        height, width = bitmap.shape[:2]

        sx = (width - 1) - x if cfg.flip_x else x
        sy = (height - 1) - y if cfg.flip_y else y

        r, g, b = bitmap[sy, sx]
        # numpy uint8 arithmetic would wrap; work with python ints
        color = (int(r), int(g), int(b))

        value = clamp_unit(luma(color, cfg.weights))
        if cfg.grayscale:
            color = grayscale(color, cfg.weights)

        return Cell(
            (x, y), color, value, map_char(value, cfg.palette, cfg.invert_palette)
        )
