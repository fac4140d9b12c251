"""Tests for aspect-ratio size derivation."""

import pytest
from asciify.errors import InvalidConfiguration
from asciify.sizing import aspect_height, aspect_width, fit_aspect, fit_terminal


class TestFitAspect:
    def test_width_constrained(self):
        assert fit_aspect(200, 100, 80, 80, 0.5) == (80, 20)

    def test_identity_when_box_matches(self):
        assert fit_aspect(123, 45, 123, 45, 1.0) == (123, 45)

    def test_smaller_than_box_is_not_enlarged(self):
        assert fit_aspect(40, 20, 80, 80) == (40, 20)

    def test_height_constrained(self):
        assert fit_aspect(100, 200, 80, 80) == (40, 80)

    def test_width_then_height(self):
        # width pass: 400x300 -> 100x75; height pass: 75 > 50 -> 66.67x50
        assert fit_aspect(400, 300, 100, 50) == (67, 50)

    def test_default_height_scale(self):
        assert fit_aspect(200, 100, 80, 80) == (80, 40)

    def test_never_below_one(self):
        assert fit_aspect(1000, 1, 10, 10, 0.5) == (10, 1)
        assert fit_aspect(1000, 1, 10, 10, 0.1) == (10, 1)
        assert fit_aspect(1, 1000, 10, 10) == (1, 10)

    def test_invalid_source(self):
        with pytest.raises(InvalidConfiguration):
            fit_aspect(0, 10, 80, 80)


class TestAspectHelpers:
    def test_aspect_height(self):
        assert aspect_height(200, 100, 80) == 40
        assert aspect_height(200, 100, 80, 0.5) == 20

    def test_aspect_width(self):
        assert aspect_width(200, 100, 20) == 40
        assert aspect_width(100, 200, 20) == 10

    def test_aspect_height_minimum(self):
        assert aspect_height(1000, 1, 10, 0.5) == 1


class TestFitTerminal:
    def test_wide_image_fills_width(self):
        assert fit_terminal(200, 100, 80, 24, 0.5) == (80, 20)

    def test_square_image_fills_height(self):
        assert fit_terminal(100, 100, 80, 24, 0.5) == (48, 24)

    def test_bad_screen(self):
        with pytest.raises(InvalidConfiguration):
            fit_terminal(100, 100, 80, 0)
