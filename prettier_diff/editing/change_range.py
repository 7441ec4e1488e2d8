"""
Change ranges — validated, immutable spans of changed lines.
"""

from __future__ import annotations

from dataclasses import dataclass


class InvalidRangeError(ValueError):
    """Raised when a range's lower bound is not strictly below its upper bound."""


@dataclass(frozen=True)
class ChangeRange:
    """A contiguous block of changed lines.

    Bounds are 1-based line numbers: ``inclusive_lower_bound`` is the first
    changed line and ``exclusive_upper_bound`` is one past the last.
    """
    inclusive_lower_bound: int
    exclusive_upper_bound: int

    def __post_init__(self) -> None:
        if self.inclusive_lower_bound >= self.exclusive_upper_bound:
            raise InvalidRangeError(
                f"inclusive_lower_bound ({self.inclusive_lower_bound}) must be "
                f"less than exclusive_upper_bound ({self.exclusive_upper_bound})"
            )

    def start(self) -> int:
        """0-based index of the first changed line."""
        return self.inclusive_lower_bound - 1

    def end(self) -> int:
        """0-based index one past the last changed line."""
        return self.exclusive_upper_bound - 1

    def contains(self, line_number: int) -> bool:
        """Return ``True`` if the 1-based *line_number* falls in this range."""
        return self.inclusive_lower_bound <= line_number < self.exclusive_upper_bound

    def __contains__(self, line_number: int) -> bool:
        return self.contains(line_number)

    def label(self) -> str:
        """Human-readable 1-based inclusive span, e.g. ``"3-7"``."""
        return f"{self.start() + 1}-{self.end()}"


def coalesce_ranges(ranges: list[ChangeRange]) -> list[ChangeRange]:
    """Sort *ranges* ascending and merge any that overlap or touch."""
    merged: list[ChangeRange] = []
    for rng in sorted(ranges, key=lambda r: r.inclusive_lower_bound):
        if merged and rng.inclusive_lower_bound <= merged[-1].exclusive_upper_bound:
            last = merged[-1]
            if rng.exclusive_upper_bound > last.exclusive_upper_bound:
                merged[-1] = ChangeRange(
                    last.inclusive_lower_bound, rng.exclusive_upper_bound
                )
            continue
        merged.append(rng)
    return merged
