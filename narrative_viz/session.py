"""Session: wires state, tutorial and scenes, and serializes intents.

Intents are handled one at a time. An intent raised while another is being
handled (for example by a render sink reacting to a new instruction) is
queued and runs right after the current one. Tutorial timers go through the
same path.
"""

import logging
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from narrative_viz.config import Config
from narrative_viz.content import TUTORIAL_STEPS
from narrative_viz.layout.annotations import AnnotationLayoutEngine
from narrative_viz.loader import DataLoadError, load_records, validate_records
from narrative_viz.models import (
    ConcussionRecord,
    NavigationState,
    SceneId,
    TutorialStep,
)
from narrative_viz.navigation.affordances import Affordances, compute_affordances
from narrative_viz.navigation.scenes import (
    RenderInstruction,
    RenderSink,
    SceneController,
    resolve_scenes,
)
from narrative_viz.navigation.timers import ManualScheduler, Scheduler, TimerHandle
from narrative_viz.navigation.tutorial import TutorialStateMachine

logger = logging.getLogger(__name__)

AffordanceListener = Callable[[Affordances], Any]


class InitializationError(RuntimeError):
    """The session could not start; nothing was rendered."""


class _GuardedScheduler:
    """Routes timer callbacks through the session's intent guard."""

    def __init__(self, inner: Scheduler, dispatch: Callable[[Callable[[], Any]], Any]) -> None:
        self.inner = inner
        self.dispatch = dispatch

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.inner.call_later(delay, lambda: self.dispatch(callback))


class NarrativeSession:
    def __init__(
        self,
        records: Sequence[ConcussionRecord],
        config: Config,
        scheduler: Scheduler,
        render_sink: RenderSink | None = None,
        on_affordances: AffordanceListener | None = None,
        steps: Sequence[TutorialStep] = TUTORIAL_STEPS,
    ) -> None:
        self.config = config
        self.on_affordances = on_affordances
        self.state = NavigationState(selected_category=config.default_category)
        self._busy = False
        self._deferred: deque[Callable[[], Any]] = deque()

        self.tutorial = TutorialStateMachine(
            self.state,
            steps,
            _GuardedScheduler(scheduler, self._dispatch),
            auto_advance_delay=config.tutorial.auto_advance_delay,
            listener=lambda _step: self._notify_affordances(),
        )
        self.scenes = resolve_scenes(records, config.scenes)
        self.controller = SceneController(
            self.state,
            records,
            self.scenes,
            self.tutorial,
            layout_engine=AnnotationLayoutEngine(config.layout),
            chart=config.chart,
            render_sink=render_sink,
        )

    # --- Intents ---

    def start(self) -> RenderInstruction | None:
        """Show the first scene. With the tutorial disabled, everything is open."""
        def action() -> RenderInstruction | None:
            if not self.config.tutorial.enabled:
                self.tutorial.skip()
            return self.controller.go_to(SceneId.SCENE1)
        return self._dispatch(action)

    def go_to(self, scene: object) -> RenderInstruction | None:
        return self._dispatch(lambda: self.controller.go_to(scene))

    def set_category(self, category: object) -> RenderInstruction | None:
        return self._dispatch(lambda: self.controller.set_category(category))

    def advance_tutorial(self) -> bool:
        return bool(self._dispatch(self.tutorial.dismiss))

    def skip_tutorial(self) -> bool:
        return bool(self._dispatch(self.tutorial.skip))

    # --- Queries ---

    @property
    def affordances(self) -> Affordances:
        return compute_affordances(
            self.state, self.tutorial.current_step, self.tutorial.terminal_index,
        )

    @property
    def busy(self) -> bool:
        return self._busy

    # --- Internals ---

    def _dispatch(self, action: Callable[[], Any]) -> Any:
        if self._busy:
            self._deferred.append(action)
            logger.debug("Intent deferred until the current one finishes")
            return None

        self._busy = True
        try:
            result = action()
            while self._deferred:
                self._deferred.popleft()()
        finally:
            self._busy = False
            self._deferred.clear()
        return result

    def _notify_affordances(self) -> None:
        if self.on_affordances is not None:
            self.on_affordances(self.affordances)


def create_session(
    records: Iterable[ConcussionRecord | dict[str, Any]],
    config: Config | None = None,
    scheduler: Scheduler | None = None,
    render_sink: RenderSink | None = None,
    on_affordances: AffordanceListener | None = None,
    steps: Sequence[TutorialStep] = TUTORIAL_STEPS,
) -> NarrativeSession:
    """Validate the records, build a session and show the first scene.

    Raises InitializationError if the data is empty or malformed.
    """
    config = config or Config()
    try:
        parsed = [
            r if isinstance(r, ConcussionRecord) else ConcussionRecord.model_validate(r)
            for r in records
        ]
        parsed = validate_records(parsed)
    except (DataLoadError, ValidationError) as e:
        logger.error("Initialization failed: %s", e)
        raise InitializationError(f"Initialization failed: {e}") from e

    session = NarrativeSession(
        parsed, config,
        scheduler=scheduler or ManualScheduler(),
        render_sink=render_sink,
        on_affordances=on_affordances,
        steps=steps,
    )
    session.start()
    return session


def open_session(
    config: Config,
    data_path: Path | None = None,
    **kwargs: Any,
) -> NarrativeSession:
    """Load the CSV named by the config (or data_path) and start a session."""
    path = data_path or config.resolved_data_path
    try:
        records = load_records(path)
    except DataLoadError as e:
        logger.error("Initialization failed: %s", e)
        raise InitializationError(f"Initialization failed: {e}") from e
    return create_session(records, config, **kwargs)
