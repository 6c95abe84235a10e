"""Linear scales from (year, count) data to plot coordinates."""

from collections.abc import Sequence
from dataclasses import dataclass

from narrative_viz.models import DataPoint

# Smallest domain width, so a single-year or all-zero window never divides by zero
MIN_DOMAIN_WIDTH = 1


@dataclass(frozen=True)
class ScaleMapper:
    """Maps years to x and counts to y for one data window.

    Built fresh for every render pass; never reused across windows.
    """

    x_domain: tuple[int, int]
    y_domain: tuple[int, int]
    width: float
    height: float

    @classmethod
    def for_window(
        cls,
        points: Sequence[DataPoint],
        width: float,
        height: float,
        headroom: int = 0,
    ) -> "ScaleMapper":
        if points:
            years = [p.year for p in points]
            x_domain = (min(years), max(years))
            y_max = max(p.max_count for p in points) + headroom
        else:
            x_domain = (0, MIN_DOMAIN_WIDTH)
            y_max = headroom
        return cls(
            x_domain=x_domain,
            y_domain=(0, y_max),
            width=width,
            height=height,
        )

    def year_to_x(self, year: float) -> float:
        lo, hi = self.x_domain
        t = (year - lo) / max(hi - lo, MIN_DOMAIN_WIDTH)
        return min(max(t, 0.0), 1.0) * self.width

    def value_to_y(self, count: float) -> float:
        lo, hi = self.y_domain
        t = (count - lo) / max(hi - lo, MIN_DOMAIN_WIDTH)
        return self.height - t * self.height

    def value_ticks(self, count: int = 8) -> list[int]:
        """Evenly spaced integer ticks from 0 to the top of the y domain."""
        top = max(self.y_domain[1], MIN_DOMAIN_WIDTH)
        count = max(count, 1)
        step = max(1, -(-top // count))  # ceil
        return list(range(0, top + 1, step))

    def year_ticks(self) -> list[int]:
        lo, hi = self.x_domain
        return list(range(lo, hi + 1))
