"""Tests for the character-width text estimator."""

import pytest

from autolayout.config import DEFAULT_CONFIG
from autolayout.text_metrics import estimate_text, line_height_for


class TestEstimateText:

    def test_line_height_is_rounded(self):
        assert line_height_for(20) == 24
        assert line_height_for(22) == 26
        assert line_height_for(16) == 19

    def test_empty_text_gets_floor_box(self):
        metrics = estimate_text("", 20, 200)
        assert metrics.lines == 1
        assert metrics.width == DEFAULT_CONFIG.min_text_width
        assert metrics.height == 24 + DEFAULT_CONFIG.text_padding

    def test_whitespace_only_is_empty(self):
        assert estimate_text("   \n\t", 20, 200) == estimate_text("", 20, 200)

    def test_floor_never_exceeds_max_width(self):
        assert estimate_text("", 20, 10).width == 10

    def test_short_text_fills_available_width(self):
        # "Hello" is 6 * 12 = 72 px; the box still spans min(360, max_width)
        metrics = estimate_text("Hello", 20, 200)
        assert metrics.lines == 1
        assert metrics.width == 200
        assert metrics.height == 36

    def test_width_capped_at_max_text_width(self):
        metrics = estimate_text("Hi", 20, 1000)
        assert metrics.width == DEFAULT_CONFIG.max_text_width

    def test_greedy_wrapping(self):
        # usable = 144 - 24 = 120; words at 12 px/char (+1 space):
        # one(48) two(48) | three(72) | four(60) five(60) | six(48)
        metrics = estimate_text("one two three four five six", 20, 144)
        assert metrics.lines == 4
        assert metrics.width == 144
        assert metrics.height == 4 * 24 + 12

    def test_overlong_word_does_not_open_empty_line(self):
        metrics = estimate_text("Supercalifragilistic", 20, 100)
        assert metrics.lines == 1
        assert metrics.width == 100

    def test_repeated_whitespace_is_one_separator(self):
        assert estimate_text("a    b", 20, 300) == estimate_text("a b", 20, 300)

    @pytest.mark.parametrize("max_width", [40, 144, 280, 360, 900])
    def test_width_never_exceeds_max_width(self, max_width):
        text = "lorem ipsum dolor sit amet consectetur adipiscing elit " * 4
        assert estimate_text(text, 16, max_width).width <= max_width

    def test_more_text_never_fewer_lines(self):
        short = estimate_text("alpha beta", 20, 160)
        long = estimate_text("alpha beta gamma delta epsilon zeta eta theta", 20, 160)
        assert long.lines > short.lines
        assert long.height > short.height

    def test_deterministic(self):
        text = "the same input always measures the same"
        assert estimate_text(text, 22, 300) == estimate_text(text, 22, 300)
