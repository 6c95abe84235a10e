"""Tests for the annotation layout engine."""

import pytest

from narrative_viz.config import LayoutConfig
from narrative_viz.content import SCENE_ANNOTATIONS
from narrative_viz.layout.annotations import AnnotationLayoutEngine, group_by_year
from narrative_viz.models import Annotation, SceneId


@pytest.fixture()
def engine():
    return AnnotationLayoutEngine(LayoutConfig())


def _assert_stacked(groups, spacing):
    for prev, nxt in zip(groups, groups[1:]):
        assert nxt.box.y == prev.box.y + prev.box.height + spacing
        assert nxt.year > prev.year


class TestLayoutExample:
    def test_two_groups_in_year_order(self, engine):
        groups = engine.layout([
            Annotation(year=2015, text="A"),
            Annotation(year=2015, text="B"),
            Annotation(year=2017, text="C"),
        ])
        assert [g.year for g in groups] == [2015, 2017]

        first, second = groups
        # title 25 + padding 12 + 2 lines * 16 + 1 gap * 8 + padding 12
        assert first.box.height == 89
        assert second.box.height == 65
        assert first.box.y == 0
        assert second.box.y == first.box.y + first.box.height + 20

    def test_item_offsets_inside_box(self, engine):
        (group,) = engine.layout([
            Annotation(year=2015, text="A"),
            Annotation(year=2015, text="B"),
        ])
        assert [i.offset_y for i in group.items] == [37, 61]


class TestLayout:
    def test_empty(self, engine):
        assert engine.layout([]) == []

    def test_numeric_not_lexicographic_sort(self, engine):
        groups = engine.layout([
            Annotation(year=10, text="ten"),
            Annotation(year=9, text="nine"),
            Annotation(year=100, text="hundred"),
        ])
        assert [g.year for g in groups] == [9, 10, 100]

    def test_insertion_order_within_year(self):
        buckets = group_by_year([
            Annotation(year=2020, text="first"),
            Annotation(year=2019, text="other"),
            Annotation(year=2020, text="second"),
        ])
        assert [a.text for a in buckets[1].annotations] == ["first", "second"]

    def test_palette_cycles_by_sorted_index(self):
        engine = AnnotationLayoutEngine(LayoutConfig(year_palette=["#111111", "#222222"]))
        groups = engine.layout([Annotation(year=y, text="x") for y in (2003, 2001, 2002)])
        assert [g.color for g in groups] == ["#111111", "#222222", "#111111"]

    def test_height_grows_with_wrapped_lines(self, engine):
        short = engine.layout([Annotation(year=2015, text="short")])[0]
        long = engine.layout([Annotation(year=2015, text="word " * 40)])[0]
        assert long.line_count > 1
        assert long.box.height == short.box.height + (long.line_count - 1) * 16

    def test_empty_text_has_no_lines(self, engine):
        (group,) = engine.layout([Annotation(year=2015, text=None)])
        assert group.items[0].lines == ()
        assert group.box.height == 25 + 12 + 12

    @pytest.mark.parametrize("scene", list(SceneId))
    def test_scene_content_is_stacked(self, engine, scene):
        groups = engine.layout(SCENE_ANNOTATIONS[scene])
        assert groups
        _assert_stacked(groups, 20)
        for g in groups:
            assert g.box.width == 300
            for item in g.items:
                for line in item.lines:
                    assert len(line) * 7 <= 270 or " " not in line

    def test_idempotent(self, engine):
        annotations = SCENE_ANNOTATIONS[SceneId.SCENE3]
        assert engine.layout(annotations) == engine.layout(annotations)


class TestMarkerColors:
    def test_known_kinds(self, engine):
        assert engine.marker_color("helmet") == "#ffa600"
        assert engine.marker_color("protocol") == "#2f4b7c"
        assert engine.marker_color("rule") == "#665191"

    def test_missing_and_unknown_kind_fall_back(self, engine):
        groups = engine.layout([
            Annotation(year=2015, text="no kind"),
            Annotation(year=2015, text="odd kind", kind="weather"),
        ])
        assert [i.marker_color for i in groups[0].items] == ["#17d721", "#17d721"]

    def test_case_insensitive(self, engine):
        assert engine.marker_color("Helmet") == "#ffa600"
