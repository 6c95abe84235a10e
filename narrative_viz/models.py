"""Pydantic models for the narrative chart."""

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

# Sentinel used in the source CSV when no games were played
MISSING_COUNT = "N/A"


class Category(str, Enum):
    COMBINED = "combined"
    PRESEASON = "preseason"
    REGULAR_SEASON = "regularSeason"

    @property
    def display_name(self) -> str:
        return {
            Category.COMBINED: "Combined",
            Category.PRESEASON: "Preseason",
            Category.REGULAR_SEASON: "Regular Season",
        }[self]


class AnnotationKind(str, Enum):
    HELMET = "helmet"
    PROTOCOL = "protocol"
    RULE = "rule"
    OTHER = "other"


class SceneId(IntEnum):
    SCENE1 = 1
    SCENE2 = 2
    SCENE3 = 3
    EXPLORE = 4

    @property
    def is_story(self) -> bool:
        """True for the three gated narrative scenes."""
        return self is not SceneId.EXPLORE


STORY_SCENES = (SceneId.SCENE1, SceneId.SCENE2, SceneId.SCENE3)


# --- Loaded data ---


class CategoryFields(BaseModel):
    """Names of the ConcussionRecord attributes plotted for a category."""
    model_config = ConfigDict(frozen=True)

    practice_field: str
    game_field: str
    total_field: str


def fields_for_category(category: Category) -> CategoryFields:
    """Map a category to the record attributes it reads."""
    prefix = {
        Category.COMBINED: "combined",
        Category.PRESEASON: "preseason",
        Category.REGULAR_SEASON: "regular_season",
    }[Category(category)]
    return CategoryFields(
        practice_field=f"{prefix}_practice",
        game_field=f"{prefix}_game",
        total_field=f"{prefix}_total",
    )


class DataPoint(BaseModel):
    """One year of counts for the selected category."""
    model_config = ConfigDict(frozen=True)

    year: int
    practice_count: int
    game_count: int
    total_count: int

    @property
    def max_count(self) -> int:
        return max(self.practice_count, self.game_count, self.total_count)


class ConcussionRecord(BaseModel):
    """One row of the concussion dataset. Aliases match the CSV headers."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    year: int = Field(alias="Year")
    preseason_practice: NonNegativeInt = Field(alias="Preseason_Practice")
    preseason_game: NonNegativeInt = Field(alias="Preseason_Game")
    preseason_total: NonNegativeInt = Field(alias="Preseason_Total")
    regular_season_practice: NonNegativeInt = Field(alias="Regular_Practice")
    regular_season_game: NonNegativeInt = Field(alias="Regular_Game")
    regular_season_total: NonNegativeInt = Field(alias="Regular_Total")
    combined_practice: NonNegativeInt = Field(alias="Combined_Practice")
    combined_game: NonNegativeInt = Field(alias="Combined_Game")
    combined_total: NonNegativeInt = Field(alias="Combined_Total")

    @field_validator(
        "preseason_game", "regular_season_game", "combined_game", mode="before",
    )
    @classmethod
    def _normalize_missing_game(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().upper() == MISSING_COUNT:
            return 0
        return value

    def point_for(self, category: Category) -> DataPoint:
        """Project this record onto the three counts of one category."""
        fields = fields_for_category(category)
        return DataPoint(
            year=self.year,
            practice_count=getattr(self, fields.practice_field),
            game_count=getattr(self, fields.game_field),
            total_count=getattr(self, fields.total_field),
        )


# --- Authored content ---


class Annotation(BaseModel):
    """An authored note tied to a year. ``kind`` drives the marker color."""
    model_config = ConfigDict(frozen=True)

    year: int
    text: str | None = None
    kind: str | None = None


class Scene(BaseModel):
    """A year-ranged view of the dataset with its annotation set."""
    model_config = ConfigDict(frozen=True)

    id: SceneId
    label: str
    year_range: tuple[int, int]
    annotations: tuple[Annotation, ...] = ()

    def contains(self, year: int) -> bool:
        lo, hi = self.year_range
        return lo <= year <= hi


class TutorialStep(BaseModel):
    """One onboarding message.

    ``advance_on_scene`` marks steps that advance on their own once the user
    enters that scene. ``unlocks`` names the scene opened when this step is
    completed.
    """
    model_config = ConfigDict(frozen=True)

    index: int
    message: str
    target_selector: str
    advance_on_scene: SceneId | None = None
    unlocks: SceneId | None = None

    @property
    def needs_dismissal(self) -> bool:
        return self.advance_on_scene is None


# --- Runtime state ---


class NavigationState(BaseModel):
    """Mutable navigation and tutorial state for one session.

    The three-slot lists are indexed by story scene (scene 1 at index 0).
    """

    current_scene: SceneId = SceneId.SCENE1
    selected_category: Category = Category.COMBINED
    tutorial_active: bool = True
    tutorial_step_index: int = 0
    scenes_completed: list[bool] = Field(default_factory=lambda: [False, False, False])
    scenes_unlocked: list[bool] = Field(default_factory=lambda: [True, False, False])

    def is_unlocked(self, scene: SceneId) -> bool:
        if not scene.is_story:
            return not self.tutorial_active
        return self.scenes_unlocked[scene - 1]

    def is_completed(self, scene: SceneId) -> bool:
        if not scene.is_story:
            return False
        return self.scenes_completed[scene - 1]

    def unlock(self, scene: SceneId) -> None:
        if scene.is_story:
            self.scenes_unlocked[scene - 1] = True

    def mark_completed(self, scene: SceneId) -> None:
        if scene.is_story:
            # completed implies unlocked
            self.scenes_unlocked[scene - 1] = True
            self.scenes_completed[scene - 1] = True
