"""Authored content: per-scene annotations and the onboarding tour."""

from narrative_viz.models import Annotation, SceneId, TutorialStep

SCENE_LABELS: dict[SceneId, str] = {
    SceneId.SCENE1: "Early Reforms",
    SceneId.SCENE2: "Guardian Caps Arrive",
    SceneId.SCENE3: "Mandates and New Rules",
    SceneId.EXPLORE: "Explore",
}

SCENE_ANNOTATIONS: dict[SceneId, list[Annotation]] = {
    SceneId.SCENE1: [
        Annotation(
            year=2015, kind="rule",
            text="NFL owners approve a new rule allowing independent concussion spotters "
                 "the authority to contact game officials directly and halt play",
        ),
        # no kind in the source notes: drawn with the default marker
        Annotation(
            year=2015,
            text="NFL introduces a yearly helmet performance ranking system with "
                 "'Top-Performing', 'Performing', and 'Not Recommended' categories",
        ),
        Annotation(
            year=2016, kind="protocol",
            text="NFL teams now face fines, loss of draft picks if they violate "
                 "concussion protocol",
        ),
        Annotation(
            year=2017, kind="helmet",
            text="Guardian wins the first NFL HeadHealthTECH challenge",
        ),
    ],
    SceneId.SCENE2: [
        Annotation(
            year=2019, kind="helmet",
            text="NFL & NFLPA engineers reveal Guardian Caps make a statistically "
                 "significant improvement over hard-shelled helmets alone",
        ),
        Annotation(
            year=2020, kind="helmet",
            text="NFL sends out a memo permitting Guardian Caps",
        ),
        Annotation(
            year=2020, kind="helmet",
            text="99% of players are wearing top-performing helmets",
        ),
        Annotation(
            year=2021, kind="helmet",
            text="NFL begins developing position-specific helmets designed on impacts "
                 "typically received",
        ),
    ],
    SceneId.SCENE3: [
        Annotation(
            year=2022, kind="rule",
            text="NFL Owners voted to mandate Guardian Caps through the second preseason "
                 "game for OL/DL/LB/TE",
        ),
        Annotation(
            year=2023, kind="rule",
            text="NFL expands rule against misuse of helmet - penalty and potential "
                 "disqualification if forcible contact made to opponent's head or neck area",
        ),
        Annotation(
            year=2023, kind="rule",
            text="Expanded use of mandated Guardian Caps",
        ),
        Annotation(
            year=2024, kind="rule",
            text="NFL allows Guardian Caps to be worn in games",
        ),
        Annotation(
            year=2024, kind="helmet",
            text="Twelve new helmet models are eligible for players to wear, five test "
                 "better than any helmet ever worn in the league",
        ),
        Annotation(
            year=2024, kind="rule",
            text="New Dynamic Kickoff format - reduced player speeds by approximately 20% "
                 "and injury rates by 32% in the preseason",
        ),
    ],
}

# Explore shows the whole story at once.
SCENE_ANNOTATIONS[SceneId.EXPLORE] = [
    a for scene in (SceneId.SCENE1, SceneId.SCENE2, SceneId.SCENE3)
    for a in SCENE_ANNOTATIONS[scene]
]


def _steps(*entries: dict[str, object]) -> list[TutorialStep]:
    return [TutorialStep(index=i, **fields) for i, fields in enumerate(entries)]  # type: ignore[arg-type]


TUTORIAL_STEPS: list[TutorialStep] = _steps(
    {
        "message": "Welcome! This chart tracks concussions reported in NFL practices "
                   "and games, season by season.",
        "target_selector": "#chart",
    },
    {
        "message": "Each line is one count: practice, game, and the total of both.",
        "target_selector": ".legend",
    },
    {
        "message": "The boxes on the right list the safety changes made each year. "
                   "Dots mark helmet, protocol, and rule changes.",
        "target_selector": ".annotation-box",
        "unlocks": SceneId.SCENE2,
    },
    {
        "message": "Scene 2 is now open. Click it to see what came next.",
        "target_selector": "#scene2-btn",
        "advance_on_scene": SceneId.SCENE2,
    },
    {
        "message": "Scene 2 adds the seasons when Guardian Caps entered the league.",
        "target_selector": ".annotation-box",
        "unlocks": SceneId.SCENE3,
    },
    {
        "message": "Scene 3 is now open. Click it for the most recent seasons.",
        "target_selector": "#scene3-btn",
        "advance_on_scene": SceneId.SCENE3,
    },
    {
        "message": "After the tour, the category menu switches between preseason, "
                   "regular season, and combined counts.",
        "target_selector": "#dataTypeSelect",
    },
    {
        "message": "That's the tour. Every scene is open, and Explore shows the whole story.",
        "target_selector": "#explore-btn",
    },
)
