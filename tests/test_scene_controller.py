"""Tests for scene navigation and gating."""

import pytest

from narrative_viz.config import ScenesConfig
from narrative_viz.models import Category, NavigationState, SceneId
from narrative_viz.navigation.scenes import resolve_scenes


class TestResolveScenes:
    def test_cumulative_ranges(self, records):
        scenes = resolve_scenes(records)
        assert scenes[SceneId.SCENE1].year_range == (2015, 2018)
        assert scenes[SceneId.SCENE2].year_range == (2015, 2021)
        assert scenes[SceneId.SCENE3].year_range == (2015, 2024)
        assert scenes[SceneId.EXPLORE].year_range == (2015, 2024)

    def test_spans_clamped_to_data(self, records):
        scenes = resolve_scenes(records[:3])
        assert scenes[SceneId.SCENE1].year_range == (2015, 2017)
        assert scenes[SceneId.SCENE2].year_range == (2015, 2017)

    def test_custom_spans(self, records):
        scenes = resolve_scenes(records, ScenesConfig(year_spans=[2, 5]))
        assert scenes[SceneId.SCENE1].year_range == (2015, 2016)
        assert scenes[SceneId.SCENE2].year_range == (2015, 2019)
        assert scenes[SceneId.SCENE3].year_range == (2015, 2024)

    def test_explore_has_every_annotation(self, records):
        scenes = resolve_scenes(records)
        story_total = sum(len(scenes[s].annotations) for s in (SceneId.SCENE1, SceneId.SCENE2, SceneId.SCENE3))
        assert len(scenes[SceneId.EXPLORE].annotations) == story_total

    def test_no_records(self):
        with pytest.raises(ValueError, match="without data"):
            resolve_scenes([])


class TestGoToGating:
    def test_starts_on_scene1(self, session, rendered):
        assert session.state.current_scene == SceneId.SCENE1
        assert session.state.scenes_completed == [True, False, False]
        assert len(rendered) == 1

    def test_locked_scene_rejected(self, session, rendered):
        before = session.state.model_copy(deep=True)
        assert session.go_to(SceneId.SCENE2) is None
        assert session.state == before
        assert len(rendered) == 1

    def test_explore_rejected_during_tutorial(self, session, rendered):
        assert session.go_to(SceneId.EXPLORE) is None
        assert session.state.current_scene == SceneId.SCENE1
        assert len(rendered) == 1

    @pytest.mark.parametrize("target", [0, 5, -1, "two", None, 2.5, 2.0, True, False])
    def test_invalid_target_rejected(self, free_session, rendered, target):
        assert free_session.go_to(target) is None
        assert free_session.state.current_scene == SceneId.SCENE1
        assert len(rendered) == 1

    def test_bool_is_not_a_scene(self, free_session, rendered):
        free_session.go_to(SceneId.SCENE3)
        assert free_session.go_to(True) is None
        assert free_session.state.current_scene == SceneId.SCENE3
        assert rendered[-1].scene == SceneId.SCENE3

    def test_failed_render_keeps_previous_scene(self, session, scheduler):
        for _ in range(3):
            session.advance_tutorial()

        def boom(_instruction):
            raise RuntimeError("renderer crashed")

        session.controller.render_sink = boom
        with pytest.raises(RuntimeError):
            session.go_to(SceneId.SCENE2)
        assert session.state.current_scene == SceneId.SCENE1
        assert session.state.scenes_completed == [True, False, False]
        assert session.state.scenes_unlocked == [True, True, False]
        assert not session.tutorial.auto_advance_pending

        session.controller.render_sink = None
        assert session.go_to(SceneId.SCENE2) is not None
        assert session.tutorial.auto_advance_pending

    def test_unlocked_scene_allowed(self, session, rendered):
        for _ in range(3):
            session.advance_tutorial()
        assert session.state.scenes_unlocked == [True, True, False]

        instruction = session.go_to(2)
        assert instruction is not None
        assert session.state.current_scene == SceneId.SCENE2
        assert session.state.scenes_completed == [True, True, False]
        assert rendered[-1] is instruction

    def test_revisiting_unlocked_scene(self, session):
        for _ in range(3):
            session.advance_tutorial()
        session.go_to(SceneId.SCENE2)
        assert session.go_to(SceneId.SCENE1) is not None
        assert session.state.current_scene == SceneId.SCENE1

    def test_everything_open_after_tutorial(self, free_session):
        for scene in SceneId:
            assert free_session.go_to(scene) is not None
            assert free_session.state.current_scene == scene

    def test_completed_implies_unlocked(self, free_session):
        for scene in SceneId:
            free_session.go_to(scene)
        state = free_session.state
        for done, unlocked in zip(state.scenes_completed, state.scenes_unlocked):
            assert not done or unlocked


class TestRenderInstruction:
    def test_scene1_window(self, session):
        instruction = session.controller.refresh()
        assert [p.year for p in instruction.data_window] == [2015, 2016, 2017, 2018]
        assert instruction.scale.x_domain == (2015, 2018)
        assert [g.year for g in instruction.annotation_groups] == [2015, 2016, 2017]
        assert instruction.fields.total_field == "combined_total"

    def test_scale_rebuilt_per_scene(self, free_session):
        first = free_session.go_to(SceneId.SCENE1)
        third = free_session.go_to(SceneId.SCENE3)
        assert first.scale.x_domain == (2015, 2018)
        assert third.scale.x_domain == (2015, 2024)

    def test_pass_ids_increase(self, free_session):
        a = free_session.go_to(SceneId.SCENE2)
        b = free_session.go_to(SceneId.SCENE3)
        assert b.pass_id > a.pass_id

    def test_affordances_follow_state(self, session):
        aff = session.controller.refresh().affordances
        assert aff.can_visit(SceneId.SCENE1)
        assert not aff.can_visit(SceneId.SCENE2)
        assert not aff.can_visit(SceneId.EXPLORE)
        assert aff.scene_buttons[SceneId.SCENE1].active
        assert aff.next_button_visible
        assert not aff.category_enabled
        assert aff.highlight_target == "#chart"


class TestCategory:
    def test_switch_on_scene3(self, free_session, rendered):
        combined = free_session.go_to(SceneId.SCENE3)
        preseason = free_session.set_category("preseason")

        assert preseason is not None
        assert rendered[-1] is preseason
        assert preseason.year_range == combined.year_range
        assert [p.year for p in preseason.data_window] == [p.year for p in combined.data_window]
        assert [p.total_count for p in preseason.data_window] != [p.total_count for p in combined.data_window]
        assert preseason.fields.game_field == "preseason_game"
        assert free_session.state.current_scene == SceneId.SCENE3
        assert free_session.state.tutorial_active is False

    def test_scale_recomputed_for_category(self, free_session):
        combined = free_session.go_to(SceneId.SCENE3)
        preseason = free_session.set_category(Category.PRESEASON)
        assert preseason.scale.y_domain != combined.scale.y_domain

    def test_ignored_during_tutorial(self, session, rendered):
        assert session.set_category("preseason") is None
        assert session.state.selected_category == Category.COMBINED
        assert len(rendered) == 1

    def test_unknown_category_ignored(self, free_session, rendered):
        assert free_session.set_category("postseason") is None
        assert free_session.state.selected_category == Category.COMBINED
        assert len(rendered) == 1


class TestTimersAcrossPasses:
    def test_new_pass_cancels_pending_auto_advance(self, session, scheduler):
        for _ in range(3):
            session.advance_tutorial()
        session.go_to(SceneId.SCENE2)
        assert session.tutorial.auto_advance_pending

        session.go_to(SceneId.SCENE1)
        assert not session.tutorial.auto_advance_pending
        scheduler.advance(10)
        assert session.state.tutorial_step_index == 3

    def test_auto_advance_after_scene_entry(self, session, scheduler):
        for _ in range(3):
            session.advance_tutorial()
        session.go_to(SceneId.SCENE2)
        scheduler.advance(2.0)
        assert session.state.tutorial_step_index == 4


def test_navigation_state_defaults():
    state = NavigationState()
    assert state.tutorial_active
    assert state.is_unlocked(SceneId.SCENE1)
    assert not state.is_unlocked(SceneId.SCENE2)
    assert not state.is_unlocked(SceneId.EXPLORE)
