"""Small helpers shared by the viewer: bounds checks, easing and symbol sorting."""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "MAX_LINE_WIDTH",
    "in_range",
    "ease_in_out_cubic",
    "sorting_name",
    "ScrollAnimation",
]

MAX_LINE_WIDTH = 10 * 1024

_CODE_DELIMITER = re.compile(r"[ *().]+")


def in_range(value: int, length: int) -> bool:
    """Check whether value is a valid index for a sequence of the given length."""
    return 0 <= value < length


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in/ease-out curve mapping [0, 1] onto [0, 1]."""
    if t < 0.5:
        return 4 * t * t * t
    return (t - 1) * (2 * t - 2) * (2 * t - 2) + 1


def sorting_name(symbol: str) -> str:
    """Key used for ordering symbols: lower case with code delimiters collapsed to spaces."""
    return _CODE_DELIMITER.sub(" ", symbol.lower())


@dataclass
class ScrollAnimation:
    """An eased scroll from one position to another over a duration in seconds."""

    active: bool = False
    from_: float = 0.0
    to: float = 0.0
    duration: float = 0.0
    started_at: float = 0.0

    def start(self, now: float, from_: float, to: float, duration: float) -> None:
        """Begin animating from ``from_`` to ``to`` at time ``now``."""
        self.active = True
        self.from_ = from_
        self.to = to
        self.duration = duration
        self.started_at = now

    def stop(self) -> None:
        """Stop the animation; further updates report the target position."""
        self.active = False

    def update(self, now: float) -> tuple[float, bool]:
        """Return the current position and whether the animation was running."""
        if not self.active:
            return self.to, False

        elapsed = now - self.started_at
        if elapsed > self.duration or self.duration <= 0:
            self.active = False
            return self.to, True

        progress = ease_in_out_cubic(elapsed / self.duration)
        return self.from_ + progress * (self.to - self.from_), True