"""Scene navigation: which year range and annotations are on screen.

Scene ranges are cumulative: every scene starts at the dataset's first year
and reveals more history than the one before it.
"""

import itertools
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from narrative_viz.config import ChartConfig, ScenesConfig
from narrative_viz.content import SCENE_ANNOTATIONS, SCENE_LABELS
from narrative_viz.layout.annotations import AnnotationGroup, AnnotationLayoutEngine
from narrative_viz.layout.scale import ScaleMapper
from narrative_viz.models import (
    STORY_SCENES,
    Annotation,
    Category,
    CategoryFields,
    ConcussionRecord,
    DataPoint,
    NavigationState,
    Scene,
    SceneId,
    fields_for_category,
)
from narrative_viz.navigation.affordances import Affordances, compute_affordances
from narrative_viz.navigation.tutorial import TutorialStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderInstruction:
    """Everything the drawing layer needs for one pass."""

    pass_id: int
    scene: SceneId
    category: Category
    year_range: tuple[int, int]
    data_window: list[DataPoint]
    fields: CategoryFields
    scale: ScaleMapper
    annotation_groups: list[AnnotationGroup]
    affordances: Affordances


RenderSink = Callable[[RenderInstruction], Any]


def resolve_scenes(
    records: Sequence[ConcussionRecord],
    config: ScenesConfig | None = None,
    annotations: Mapping[SceneId, Sequence[Annotation]] = SCENE_ANNOTATIONS,
) -> dict[SceneId, Scene]:
    """Anchor the configured year spans to the dataset's first year."""
    config = config or ScenesConfig()
    if not records:
        raise ValueError("Cannot resolve scenes without data")
    first = min(r.year for r in records)
    last = max(r.year for r in records)

    scenes: dict[SceneId, Scene] = {}
    for scene_id, span in itertools.zip_longest(STORY_SCENES, config.year_spans[:len(STORY_SCENES)]):
        hi = last if span is None else min(first + span - 1, last)
        scenes[scene_id] = Scene(
            id=scene_id,
            label=SCENE_LABELS.get(scene_id, f"Scene {int(scene_id)}"),
            year_range=(first, hi),
            annotations=tuple(annotations.get(scene_id, ())),
        )
    scenes[SceneId.EXPLORE] = Scene(
        id=SceneId.EXPLORE,
        label=SCENE_LABELS.get(SceneId.EXPLORE, "Explore"),
        year_range=(first, last),
        annotations=tuple(annotations.get(SceneId.EXPLORE, ())),
    )
    return scenes


def _coerce(enum_cls: type, value: object) -> Any:
    # bool is an int and 2.0 == 2; neither names a scene
    if isinstance(value, bool):
        return None
    if issubclass(enum_cls, int) and not isinstance(value, int):
        return None
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


class SceneController:
    def __init__(
        self,
        state: NavigationState,
        records: Sequence[ConcussionRecord],
        scenes: Mapping[SceneId, Scene],
        tutorial: TutorialStateMachine,
        layout_engine: AnnotationLayoutEngine | None = None,
        chart: ChartConfig | None = None,
        render_sink: RenderSink | None = None,
    ) -> None:
        self.state = state
        self.records = sorted(records, key=lambda r: r.year)
        self.scenes = dict(scenes)
        self.tutorial = tutorial
        self.layout_engine = layout_engine or AnnotationLayoutEngine()
        self.chart = chart or ChartConfig()
        self.render_sink = render_sink
        self._pass_ids = itertools.count(1)

    def go_to(self, target: object) -> RenderInstruction | None:
        """Switch scenes. Returns None (and changes nothing) when rejected."""
        scene = _coerce(SceneId, target)
        if scene is None or scene not in self.scenes:
            logger.debug("Rejected go_to(%r): unknown scene", target)
            return None
        if self.state.tutorial_active:
            if scene is SceneId.EXPLORE:
                logger.debug("Rejected go_to(explore): tutorial active")
                return None
            if not self.state.is_unlocked(scene):
                logger.debug("Rejected go_to(%d): scene locked", scene)
                return None

        previous = (
            self.state.current_scene,
            list(self.state.scenes_completed),
            list(self.state.scenes_unlocked),
        )
        self.state.current_scene = scene
        self.state.mark_completed(scene)

        try:
            instruction = self._render_pass()
        except Exception:
            # A failed pass leaves the previous scene on screen
            (
                self.state.current_scene,
                self.state.scenes_completed,
                self.state.scenes_unlocked,
            ) = previous
            logger.error("Render pass for scene %d failed; staying on scene %d", scene, previous[0])
            raise

        logger.info("Entered scene %d (%s)", scene, self.scenes[scene].label)
        self.tutorial.on_scene_entered(scene)
        return instruction

    def set_category(self, category: object) -> RenderInstruction | None:
        """Redraw the current scene with another category. Pinned during the tutorial."""
        if self.state.tutorial_active:
            logger.debug("Ignored category change to %r: tutorial active", category)
            return None
        cat = _coerce(Category, category)
        if cat is None:
            logger.debug("Ignored unknown category %r", category)
            return None

        self.state.selected_category = cat
        return self._render_pass()

    def refresh(self) -> RenderInstruction:
        """Re-emit the current scene without changing any state."""
        return self._render_pass()

    def data_window(self, scene: SceneId, category: Category) -> list[DataPoint]:
        s = self.scenes[scene]
        return [r.point_for(category) for r in self.records if s.contains(r.year)]

    def build_instruction(self) -> RenderInstruction:
        scene = self.scenes[self.state.current_scene]
        category = self.state.selected_category
        window = self.data_window(scene.id, category)
        return RenderInstruction(
            pass_id=next(self._pass_ids),
            scene=scene.id,
            category=category,
            year_range=scene.year_range,
            data_window=window,
            fields=fields_for_category(category),
            scale=ScaleMapper.for_window(
                window, self.chart.width, self.chart.height, self.chart.value_headroom,
            ),
            annotation_groups=self.layout_engine.layout(scene.annotations),
            affordances=compute_affordances(
                self.state, self.tutorial.current_step, self.tutorial.terminal_index,
            ),
        )

    def _render_pass(self) -> RenderInstruction:
        # A new pass supersedes any timer armed by the previous one
        self.tutorial.cancel_pending()
        instruction = self.build_instruction()
        if self.render_sink is not None:
            self.render_sink(instruction)
        return instruction
