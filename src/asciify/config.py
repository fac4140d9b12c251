"""Reader configuration bundle and resample filter selection."""

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from PIL import Image

from .color import DEFAULT_WEIGHTS, Weights
from .errors import InvalidConfiguration, UnsupportedFilter
from .palette import DEFAULT_PALETTE, validate_palette


class ResampleFilter(Enum):
    DEFAULT = "default"
    FAST = "fast"
    SMOOTH = "smooth"
    REPLICATE = "replicate"
    AREA_AVERAGING = "area_averaging"

    @classmethod
    def parse(cls, name: Union[str, "ResampleFilter"]) -> "ResampleFilter":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower().replace("-", "_"))
        except ValueError:
            raise UnsupportedFilter(name) from None

    @property
    def pillow_filter(self) -> Optional[Image.Resampling]:
        """Pillow equivalent, or None to let ``Image.resize`` pick its default."""
        return _PILLOW_FILTERS[self]


_PILLOW_FILTERS = {
    ResampleFilter.DEFAULT: None,
    ResampleFilter.FAST: Image.Resampling.NEAREST,
    ResampleFilter.SMOOTH: Image.Resampling.LANCZOS,
    ResampleFilter.REPLICATE: Image.Resampling.NEAREST,
    ResampleFilter.AREA_AVERAGING: Image.Resampling.BOX,
}


@dataclass(frozen=True)
class ReaderConfig:
    """Everything the cell sampler needs besides the image itself.

    Validated on construction; use :meth:`replace` to derive a modified copy.
    """

    palette: str = DEFAULT_PALETTE
    invert_palette: bool = False
    grayscale: bool = False

    red_weight: float = DEFAULT_WEIGHTS[0]
    green_weight: float = DEFAULT_WEIGHTS[1]
    blue_weight: float = DEFAULT_WEIGHTS[2]

    flip_x: bool = False
    flip_y: bool = False

    resample_filter: ResampleFilter = ResampleFilter.SMOOTH
    # characters are assumed to be about twice as tall as they are wide
    height_scale: float = 0.5

    def __post_init__(self):
        validate_palette(self.palette)
        object.__setattr__(
            self, "resample_filter", ResampleFilter.parse(self.resample_filter)
        )
        if not self.height_scale > 0:
            raise InvalidConfiguration(
                f"Height scale must be positive, got {self.height_scale}"
            )
        for name, value in zip(("red", "green", "blue"), self.weights):
            if not math.isfinite(value):
                raise InvalidConfiguration(f"The {name} weight must be finite, got {value}")

    @property
    def weights(self) -> Weights:
        return self.red_weight, self.green_weight, self.blue_weight

    def replace(self, **changes) -> "ReaderConfig":
        return dataclasses.replace(self, **changes)
