"""Tests for the cell sampler."""

from unittest.mock import patch

import pytest
from PIL import Image
from asciify.color import clamp_unit, luma
from asciify.config import ReaderConfig, ResampleFilter
from asciify.errors import InvalidConfiguration
from asciify.reader import Cell, ImageAsciiReader, Row
from asciify.resampler import resample

# --- Fixtures ---

PIXELS = [
    [(0, 0, 0), (255, 0, 0), (255, 255, 255)],
    [(0, 0, 255), (0, 255, 0), (128, 128, 128)],
]


@pytest.fixture
def image():
    img = Image.new("RGB", (3, 2))
    for y, row in enumerate(PIXELS):
        for x, rgb in enumerate(row):
            img.putpixel((x, y), rgb)
    return img


@pytest.fixture
def config():
    return ReaderConfig(palette=" .:-=+*#%@", resample_filter=ResampleFilter.REPLICATE)


@pytest.fixture
def reader(image, config):
    return ImageAsciiReader(image, config)


def grid(reader, cols=3, rows=2):
    return [list(row) for row in reader.read(cols, rows)]


# --- Tests ---


class TestConstruction:
    def test_defaults(self, image):
        reader = ImageAsciiReader(image)
        assert reader.config == ReaderConfig()
        assert reader.image_width == 3
        assert reader.image_height == 2
        assert reader.work_size is None

    def test_non_rgb_is_converted(self):
        reader = ImageAsciiReader(Image.new("RGBA", (4, 4), (1, 2, 3, 0)))
        assert reader.image.mode == "RGB"

    def test_empty_image_rejected(self):
        with pytest.raises(InvalidConfiguration):
            ImageAsciiReader(Image.new("RGB", (0, 0)))

    def test_none_rejected(self):
        with pytest.raises(InvalidConfiguration):
            ImageAsciiReader(None)


class TestRead:
    def test_shape(self, reader):
        rows = reader.read(3, 2)
        assert len(rows) == 2
        assert all(isinstance(r, Row) and len(r) == 3 for r in rows)
        assert reader.work_size == (3, 2)

    def test_coordinates(self, reader):
        cells = grid(reader)
        assert [c.coord for c in cells[1]] == [(0, 1), (1, 1), (2, 1)]

    def test_cell_values(self, reader, config):
        cells = grid(reader)
        red = cells[0][1]
        assert isinstance(red, Cell)
        assert red.color == (255, 0, 0)
        assert red.luma == pytest.approx(0.2989)
        assert cells[0][0].char == config.palette[0]
        assert cells[0][2].char == config.palette[-1]

    def test_colors_are_python_ints(self, reader):
        cell = grid(reader)[1][2]
        assert all(type(c) is int for c in cell.color)

    def test_row_is_reiterable(self, reader):
        row = reader.read(3, 2)[0]
        assert list(row) == list(row)

    def test_rows_indexing(self, reader):
        rows = reader.read(3, 2)
        assert rows[-1].index == 1
        with pytest.raises(IndexError):
            rows[2]

    def test_same_dimensions_do_not_resample(self, reader):
        with patch("asciify.resampler.resample", wraps=resample) as spy:
            first = grid(reader)
            second = grid(reader)
        assert spy.call_count == 1
        assert first == second

    def test_new_dimensions_resample(self, reader):
        with patch("asciify.resampler.resample", wraps=resample) as spy:
            grid(reader, 3, 2)
            grid(reader, 6, 4)
            grid(reader, 6, 4)
        assert spy.call_count == 2
        assert reader.work_size == (6, 4)

    def test_resamples_eagerly(self, reader):
        with patch("asciify.resampler.resample", wraps=resample) as spy:
            reader.read(5, 5)
        assert spy.call_count == 1

    @pytest.mark.parametrize("cols, rows", [(0, 1), (1, 0), (-3, 2)])
    def test_invalid_dimensions(self, reader, cols, rows):
        with pytest.raises(InvalidConfiguration):
            reader.read(cols, rows)

    def test_get_pixel_requires_read(self, reader):
        with pytest.raises(RuntimeError):
            reader.get_pixel(0, 0)


class TestFlip:
    def test_flip_x(self, image, config):
        plain = grid(ImageAsciiReader(image, config))
        flipped = grid(ImageAsciiReader(image, config.replace(flip_x=True)))
        for y in range(2):
            for x in range(3):
                f, p = flipped[y][x], plain[y][2 - x]
                assert f.coord == (x, y)
                assert (f.color, f.luma, f.char) == (p.color, p.luma, p.char)

    def test_flip_y(self, image, config):
        plain = grid(ImageAsciiReader(image, config))
        flipped = grid(ImageAsciiReader(image, config.replace(flip_y=True)))
        for y in range(2):
            for x in range(3):
                f, p = flipped[y][x], plain[1 - y][x]
                assert f.coord == (x, y)
                assert (f.color, f.luma, f.char) == (p.color, p.luma, p.char)

    def test_flip_both(self, image, config):
        plain = grid(ImageAsciiReader(image, config))
        flipped = grid(ImageAsciiReader(image, config.replace(flip_x=True, flip_y=True)))
        assert flipped[0][0].color == plain[1][2].color


class TestShading:
    def test_invert_palette(self, image, config):
        cells = grid(ImageAsciiReader(image, config.replace(invert_palette=True)))
        assert cells[0][0].char == config.palette[-1]
        assert cells[0][2].char == config.palette[0]

    def test_grayscale(self, image, config):
        cells = grid(ImageAsciiReader(image, config.replace(grayscale=True)))
        for row in cells:
            for cell in row:
                r, g, b = cell.color
                assert r == g == b
        # luma still comes from the original color
        assert cells[0][1].luma == pytest.approx(0.2989)

    def test_extreme_weights_are_clamped(self, image, config):
        cfg = config.replace(red_weight=3.0, green_weight=3.0, blue_weight=3.0)
        cells = grid(ImageAsciiReader(image, cfg))
        for row in cells:
            for cell in row:
                assert 0.0 <= cell.luma <= 1.0
        assert cells[1][2].char == config.palette[-1]

    def test_negative_weights_are_clamped(self, image, config):
        cfg = config.replace(red_weight=-1.0)
        cell = grid(ImageAsciiReader(image, cfg))[0][1]
        assert cell.luma == 0.0
        assert cell.char == config.palette[0]

    def test_overflowing_weights_do_not_fail(self, image, config):
        cfg = config.replace(red_weight=1e308, green_weight=-1e308, grayscale=True)
        cells = grid(ImageAsciiReader(image, cfg))
        # white: +inf and -inf cancel into NaN, which clamps to 0
        white = cells[0][2]
        assert white.luma == 0.0
        assert white.color == (0, 0, 0)
        assert white.char == config.palette[0]

    def test_luma_matches_color_model(self, reader):
        cell = grid(reader)[1][2]
        assert cell.luma == pytest.approx(clamp_unit(luma((128, 128, 128))))


class TestSizing:
    def test_fit_aspect(self):
        reader = ImageAsciiReader(Image.new("RGB", (200, 100)))
        assert reader.fit_aspect(80, 80, 0.5) == (80, 20)

    def test_aspect_helpers(self):
        reader = ImageAsciiReader(Image.new("RGB", (200, 100)))
        assert reader.aspect_height(80, 0.5) == 20
        assert reader.aspect_width(20) == 40
