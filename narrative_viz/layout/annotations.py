"""Annotation layout: one stacked box per year.

Years are sorted numerically and each gets a palette color by position.
Box height follows the wrapped text, so every scene switch re-runs the
layout from scratch; the result depends only on the input annotations.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from narrative_viz.config import LayoutConfig
from narrative_viz.layout.text_wrap import TextWrapper
from narrative_viz.models import Annotation, AnnotationKind

logger = logging.getLogger(__name__)


# --- Data structures ---


@dataclass(frozen=True)
class BoxGeometry:
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class WrappedAnnotation:
    """An annotation placed inside its year box."""

    annotation: Annotation
    lines: tuple[str, ...]
    marker_color: str
    offset_y: float  # top of the first line, relative to the box


@dataclass(frozen=True)
class AnnotationGroup:
    """All annotations for one year, laid out as a single box."""

    year: int
    color: str
    items: tuple[WrappedAnnotation, ...]
    box: BoxGeometry

    @property
    def line_count(self) -> int:
        return sum(len(i.lines) for i in self.items)


@dataclass
class _YearBucket:
    year: int
    annotations: list[Annotation] = field(default_factory=list)


# --- Layout ---


def group_by_year(annotations: Iterable[Annotation]) -> list[_YearBucket]:
    """Partition by year, ascending, keeping authored order within a year."""
    buckets: dict[int, _YearBucket] = {}
    for a in annotations:
        year = int(a.year)
        if year not in buckets:
            buckets[year] = _YearBucket(year)
        buckets[year].annotations.append(a)
    return [buckets[y] for y in sorted(buckets)]


class AnnotationLayoutEngine:
    def __init__(
        self,
        config: LayoutConfig | None = None,
        wrapper: TextWrapper | None = None,
    ) -> None:
        self.config = config or LayoutConfig()
        self.wrapper = wrapper or TextWrapper(self.config.average_char_width)

    def marker_color(self, kind: str | None) -> str:
        """Color for an annotation kind. Unknown or missing kinds get the default."""
        if kind is None:
            return self.config.default_kind_color
        key = kind.value if isinstance(kind, AnnotationKind) else str(kind).lower()
        return self.config.kind_colors.get(key, self.config.default_kind_color)

    def year_color(self, index: int) -> str:
        palette = self.config.year_palette
        return palette[index % len(palette)]

    def layout(self, annotations: Iterable[Annotation]) -> list[AnnotationGroup]:
        cfg = self.config
        groups: list[AnnotationGroup] = []
        y = 0.0

        for index, bucket in enumerate(group_by_year(annotations)):
            items: list[WrappedAnnotation] = []
            text_y = float(cfg.title_height + cfg.top_padding)
            for a in bucket.annotations:
                lines = tuple(self.wrapper.wrap(a.text, cfg.content_width))
                items.append(WrappedAnnotation(
                    annotation=a,
                    lines=lines,
                    marker_color=self.marker_color(a.kind),
                    offset_y=text_y,
                ))
                text_y += len(lines) * cfg.line_height + cfg.item_spacing

            height = self.box_height([len(i.lines) for i in items])
            groups.append(AnnotationGroup(
                year=bucket.year,
                color=self.year_color(index),
                items=tuple(items),
                box=BoxGeometry(x=0.0, y=y, width=float(cfg.box_width), height=height),
            ))
            y += height + cfg.group_spacing

        logger.debug("Laid out %d annotation groups, %.0fpx tall", len(groups), max(y - cfg.group_spacing, 0))
        return groups

    def box_height(self, line_counts: list[int]) -> float:
        """Height of a box holding items with the given wrapped line counts."""
        cfg = self.config
        n = len(line_counts)
        return float(
            cfg.title_height
            + cfg.top_padding
            + sum(line_counts) * cfg.line_height
            + max(n - 1, 0) * cfg.item_spacing
            + cfg.bottom_padding
        )
