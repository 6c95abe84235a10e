"""Configuration loading for the narrative chart."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, PositiveInt

from narrative_viz.models import Category


class ChartConfig(BaseModel):
    width: int = 780  # plot area, margins excluded
    height: int = 310
    margin_top: int = 40
    margin_right: int = 160
    margin_bottom: int = 50
    margin_left: int = 60
    value_headroom: int = 20
    y_ticks: int = 8
    annotation_panel_offset: int = 180  # from the plot's right edge
    practice_color: str = "#ff6b6b"
    game_color: str = "#4ecdc4"
    total_color: str = "#556270"


class LayoutConfig(BaseModel):
    box_width: int = 300
    content_inset: int = 30
    title_height: int = 25
    top_padding: int = 12
    bottom_padding: int = 12
    line_height: int = 16
    item_spacing: int = 8
    group_spacing: int = 20
    average_char_width: float = 7.0
    year_palette: list[str] = Field(default_factory=lambda: [
        "#e74c3c", "#3498db", "#2ecc71", "#f39c12",
        "#9b59b6", "#1abc9c", "#e67e22", "#34495e",
    ])
    kind_colors: dict[str, str] = Field(default_factory=lambda: {
        "helmet": "#ffa600",
        "protocol": "#2f4b7c",
        "rule": "#665191",
    })
    default_kind_color: str = "#17d721"

    @property
    def content_width(self) -> int:
        return self.box_width - self.content_inset


class TutorialConfig(BaseModel):
    enabled: bool = True
    auto_advance_delay: float = 3.0  # seconds; matches the line draw animation


class ScenesConfig(BaseModel):
    # Years covered by scenes 1..3, counted from the dataset's first year.
    # None means the full range.
    year_spans: list[PositiveInt | None] = Field(default_factory=lambda: [4, 7, None])


class Config(BaseModel):
    data_path: str = "data/concussions.csv"
    output_dir: str = "data/renders"
    default_category: Category = Category.COMBINED
    chart: ChartConfig = Field(default_factory=ChartConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    tutorial: TutorialConfig = Field(default_factory=TutorialConfig)
    scenes: ScenesConfig = Field(default_factory=ScenesConfig)

    @property
    def resolved_data_path(self) -> Path:
        """Resolve data_path relative to project root."""
        p = Path(self.data_path).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p

    @property
    def resolved_output_dir(self) -> Path:
        p = Path(self.output_dir).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p


def _project_root() -> Path:
    """Return the narrative_viz project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
