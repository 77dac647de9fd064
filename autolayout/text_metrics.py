"""
Text size estimation without a font engine.

Every character is taken to be ``char_width_ratio × font_size`` wide and
words are wrapped greedily. The canvas recalculates real glyph metrics when
it renders, so this only has to be close enough to size boxes.
"""

import re
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, LayoutConfig

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextMetrics:
    """Estimated rendered size of a block of text."""
    width: float
    height: float
    lines: int
    line_height: int


def line_height_for(font_size: int, config: LayoutConfig = DEFAULT_CONFIG) -> int:
    return round(font_size * config.line_height_ratio)


def estimate_text(
    text: str,
    font_size: int,
    max_width: float,
    config: LayoutConfig = DEFAULT_CONFIG
) -> TextMetrics:
    """
    Estimate the wrapped size of ``text``.

    Args:
        text: The text to measure
        font_size: Font size in pixels
        max_width: Widest the box may be, padding included
        config: Layout constants

    Returns:
        TextMetrics; width never exceeds ``max_width``
    """
    padding = config.text_padding
    line_height = line_height_for(font_size, config)

    if not text or not text.strip():
        return TextMetrics(
            width=min(config.min_text_width, max_width),
            height=line_height + padding,
            lines=1,
            line_height=line_height,
        )

    char_width = font_size * config.char_width_ratio
    usable = max_width - padding * 2

    line_width = 0.0
    lines = 1
    for word in _WHITESPACE.split(text.strip()):
        w = (len(word) + 1) * char_width  # word + space
        # An over-long word on an empty line stays on that line
        if line_width > 0 and line_width + w > usable:
            lines += 1
            line_width = w
        else:
            line_width += w

    width = min(
        max(line_width + padding * 2, min(config.max_text_width, max_width)),
        max_width,
    )
    return TextMetrics(
        width=width,
        height=lines * line_height + padding,
        lines=lines,
        line_height=line_height,
    )
