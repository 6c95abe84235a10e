"""Shared test fixtures for narrative_viz tests."""

import pytest

from narrative_viz.config import Config, TutorialConfig
from narrative_viz.models import ConcussionRecord
from narrative_viz.navigation.timers import ManualScheduler
from narrative_viz.session import create_session


def make_record(year: int, preseason: tuple[int, int], regular: tuple[int, int]) -> ConcussionRecord:
    """Build a record from (practice, game) pairs; totals and combined are derived."""
    pre_p, pre_g = preseason
    reg_p, reg_g = regular
    return ConcussionRecord(
        year=year,
        preseason_practice=pre_p,
        preseason_game=pre_g,
        preseason_total=pre_p + pre_g,
        regular_season_practice=reg_p,
        regular_season_game=reg_g,
        regular_season_total=reg_p + reg_g,
        combined_practice=pre_p + reg_p,
        combined_game=pre_g + reg_g,
        combined_total=pre_p + pre_g + reg_p + reg_g,
    )


@pytest.fixture()
def records():
    """Ten synthetic seasons, 2015-2024. Preseason and regular season differ every year."""
    return [
        make_record(2015 + i, preseason=(20 + i, 40 - i), regular=(10 + i, 150 - 3 * i))
        for i in range(10)
    ]


@pytest.fixture()
def config():
    return Config(tutorial=TutorialConfig(enabled=True, auto_advance_delay=2.0))


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def rendered():
    """A render sink that just collects instructions."""
    return []


@pytest.fixture()
def session(records, config, scheduler, rendered):
    """Session started on scene 1 with the tutorial running."""
    return create_session(records, config, scheduler=scheduler, render_sink=rendered.append)


@pytest.fixture()
def free_session(records, scheduler, rendered):
    """Session with the tutorial disabled, so every scene and category is open."""
    config = Config(tutorial=TutorialConfig(enabled=False))
    return create_session(records, config, scheduler=scheduler, render_sink=rendered.append)
