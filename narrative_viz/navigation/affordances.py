"""Button and overlay state derived from navigation state."""

from dataclasses import dataclass, field

from narrative_viz.models import NavigationState, SceneId, TutorialStep


@dataclass(frozen=True)
class ButtonState:
    enabled: bool
    active: bool = False
    completed: bool = False


@dataclass(frozen=True)
class Affordances:
    """What the input layer should show and accept right now."""

    scene_buttons: dict[SceneId, ButtonState] = field(default_factory=dict)
    next_button_visible: bool = False
    category_enabled: bool = True
    tutorial_message: str | None = None
    highlight_target: str | None = None
    progress_label: str | None = None

    def can_visit(self, scene: SceneId) -> bool:
        button = self.scene_buttons.get(scene)
        return bool(button and button.enabled)


def compute_affordances(
    state: NavigationState,
    step: TutorialStep | None,
    total_steps: int = 0,
) -> Affordances:
    buttons = {
        scene: ButtonState(
            enabled=state.is_unlocked(scene),
            active=state.current_scene == scene,
            completed=state.is_completed(scene),
        )
        for scene in SceneId
    }

    if not state.tutorial_active or step is None:
        return Affordances(scene_buttons=buttons, category_enabled=not state.tutorial_active)

    return Affordances(
        scene_buttons=buttons,
        next_button_visible=step.needs_dismissal,
        category_enabled=False,
        tutorial_message=step.message,
        highlight_target=step.target_selector,
        progress_label=f"{step.index + 1} / {total_steps}" if total_steps else None,
    )
