"""Keep emitted primitives inside the canvas coordinate envelope."""

from typing import TypeVar

from .config import DEFAULT_CONFIG
from .models import ElementBase

E = TypeVar("E", bound=ElementBase)


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def clamp_elements(elements: list[E], limit: float = DEFAULT_CONFIG.coord_limit) -> list[E]:
    """
    Clamp every element's x and y to ``[-limit, limit]``.

    Width, height, points and all other fields are left as they are.
    Returns new element objects; the input list is not modified.
    """
    return [
        el.model_copy(update={
            "x": clamp(el.x, -limit, limit),
            "y": clamp(el.y, -limit, limit),
        })
        for el in elements
    ]
