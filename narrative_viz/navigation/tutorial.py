"""Onboarding tour that gates scene navigation.

The tour is a fixed list of steps. Reaching an index can fire an effect on
the navigation state (unlock a scene, end the tour); the mapping lives in a
table built from the step definitions. Steps that wait for a scene entry
advance themselves after a delay; the rest need the user to dismiss them.
"""

import logging
from collections.abc import Callable, Sequence

from narrative_viz.models import STORY_SCENES, NavigationState, SceneId, TutorialStep
from narrative_viz.navigation.timers import Scheduler, TimerSlot

logger = logging.getLogger(__name__)

StepEffect = Callable[[NavigationState], None]


def _unlock(scene: SceneId) -> StepEffect:
    def effect(state: NavigationState) -> None:
        state.unlock(scene)
        logger.info("Scene %d unlocked", scene)
    return effect


def _finish(state: NavigationState) -> None:
    state.tutorial_active = False
    for scene in STORY_SCENES:
        state.unlock(scene)
    logger.info("Tutorial complete")


def build_effect_table(steps: Sequence[TutorialStep]) -> dict[int, list[StepEffect]]:
    """Map each step index to the effects fired on reaching it.

    A step's ``unlocks`` fires once it is completed, i.e. on reaching the next
    index. Reaching ``len(steps)`` ends the tour.
    """
    table: dict[int, list[StepEffect]] = {}
    for step in steps:
        if step.unlocks is not None:
            table.setdefault(step.index + 1, []).append(_unlock(step.unlocks))
    table.setdefault(len(steps), []).append(_finish)
    return table


class TutorialStateMachine:
    def __init__(
        self,
        state: NavigationState,
        steps: Sequence[TutorialStep],
        scheduler: Scheduler,
        auto_advance_delay: float = 3.0,
        listener: Callable[[TutorialStep | None], None] | None = None,
    ) -> None:
        self.state = state
        self.steps = list(steps)
        self.auto_advance_delay = auto_advance_delay
        self.listener = listener
        self._effects = build_effect_table(self.steps)
        self._timer = TimerSlot(scheduler, name="tutorial auto-advance")

    @property
    def terminal_index(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> TutorialStep | None:
        if not self.state.tutorial_active:
            return None
        idx = self.state.tutorial_step_index
        if 0 <= idx < len(self.steps):
            return self.steps[idx]
        return None

    @property
    def auto_advance_pending(self) -> bool:
        return self._timer.pending

    def advance(self) -> bool:
        """Move to the next step. Returns False once the tour has ended."""
        if not self.state.tutorial_active or self.state.tutorial_step_index >= self.terminal_index:
            logger.debug("Tutorial already complete; advance ignored")
            return False

        self._timer.cancel()
        self.state.tutorial_step_index += 1
        for effect in self._effects.get(self.state.tutorial_step_index, []):
            effect(self.state)

        logger.debug("Tutorial at step %d/%d", self.state.tutorial_step_index, self.terminal_index)
        if self.listener:
            self.listener(self.current_step)
        return True

    def dismiss(self) -> bool:
        """User asked for the next step. Steps waiting on a scene entry stay put."""
        step = self.current_step
        if step is None:
            return False
        if not step.needs_dismissal:
            logger.debug("Step %d waits for scene %d", step.index, step.advance_on_scene)
            return False
        return self.advance()

    def skip(self) -> bool:
        """Jump to the end, firing every remaining effect once."""
        if not self.state.tutorial_active:
            return False
        while self.advance():
            pass
        return True

    def on_scene_entered(self, scene: SceneId) -> None:
        step = self.current_step
        if step is None or step.advance_on_scene != scene:
            return
        self._timer.schedule(self.auto_advance_delay, self._auto_advance(step.index))

    def cancel_pending(self) -> None:
        self._timer.cancel()

    def _auto_advance(self, expected_index: int) -> Callable[[], None]:
        def fire() -> None:
            if self.state.tutorial_step_index != expected_index:
                return  # state moved on before the timer fired
            self.advance()
        return fire
