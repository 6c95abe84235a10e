"""PNG renderer: draws a RenderInstruction with Pillow.

Layout:
  plot (axes, grid, three series, year markers) on the left,
  legend just right of the plot, annotation boxes further right,
  tutorial banner along the bottom while the tour is running.

Every call draws a fresh image; nothing carries over between passes.
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from narrative_viz.config import ChartConfig, Config, LayoutConfig
from narrative_viz.layout.annotations import AnnotationGroup
from narrative_viz.layout.scale import ScaleMapper
from narrative_viz.navigation.scenes import RenderInstruction

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"


def _font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    path = _FONT_BOLD if bold else _FONT_REGULAR
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        # DejaVu not installed; Pillow's bundled font still scales
        return ImageFont.load_default(size=size)


# --- Colors ---

BG = (255, 255, 255)
TEXT = (51, 51, 51)
AXIS = (0, 0, 0)
GRID = (210, 210, 210)
BOX_FILL = (248, 249, 250)
BOX_BORDER = (222, 226, 230)
BANNER_BG = (33, 37, 41)
BANNER_TEXT = (248, 249, 250)
BANNER_DIM = (173, 181, 189)

# --- Dimensions ---

LEGEND_GAP = 20
LEGEND_SWATCH = (20, 18)
LEGEND_ROW = 25
MARKER_TOP = -30  # year marker lines start above the plot
BANNER_HEIGHT = 70
BOX_RADIUS = 6
DOT_RADIUS = 4


def _dashed_line(
    draw: ImageDraw.ImageDraw,
    start: tuple[float, float],
    end: tuple[float, float],
    fill: tuple[int, int, int] | str,
    width: int = 1,
    dash: int = 5,
    gap: int = 5,
) -> None:
    """Straight dashed line (horizontal or vertical)."""
    (x0, y0), (x1, y1) = start, end
    length = max(abs(x1 - x0), abs(y1 - y0))
    if length == 0:
        return
    dx, dy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        draw.line(
            [(x0 + dx * pos, y0 + dy * pos), (x0 + dx * seg_end, y0 + dy * seg_end)],
            fill=fill, width=width,
        )
        pos += dash + gap


class PngRenderer:
    """Render sink that writes one PNG per render pass."""

    def __init__(self, output_dir: Path, config: Config | None = None) -> None:
        config = config or Config()
        self.output_dir = Path(output_dir)
        self.chart: ChartConfig = config.chart
        self.layout: LayoutConfig = config.layout
        self.written: list[Path] = []

    def __call__(self, instruction: RenderInstruction) -> Path:
        name = (
            f"pass{instruction.pass_id:03d}_scene{int(instruction.scene)}_"
            f"{instruction.category.value}.png"
        )
        return self.render(instruction, self.output_dir / name)

    # --- Geometry ---

    def _panel_x(self) -> int:
        return self.chart.margin_left + self.chart.width + self.chart.annotation_panel_offset

    def canvas_size(self, instruction: RenderInstruction) -> tuple[int, int]:
        c = self.chart
        width = self._panel_x() + self.layout.box_width + c.margin_left
        plot_bottom = c.margin_top + c.height + c.margin_bottom
        panel_bottom = c.margin_top
        if instruction.annotation_groups:
            panel_bottom += int(instruction.annotation_groups[-1].box.bottom)
        height = max(plot_bottom, panel_bottom + c.margin_bottom)
        if instruction.affordances.tutorial_message:
            height += BANNER_HEIGHT
        return width, height

    # --- Drawing ---

    def render(self, instruction: RenderInstruction, output_path: Path) -> Path:
        width, height = self.canvas_size(instruction)
        img = Image.new("RGB", (width, height), BG)
        draw = ImageDraw.Draw(img)

        ox, oy = self.chart.margin_left, self.chart.margin_top
        scale = instruction.scale

        self._draw_grid_and_axes(img, draw, scale, ox, oy, n_years=len(instruction.data_window))
        self._draw_year_markers(draw, scale, instruction.annotation_groups, ox, oy)
        self._draw_series(draw, instruction, ox, oy)
        self._draw_legend(draw, ox + self.chart.width + LEGEND_GAP, oy + 20)

        title = f"{instruction.category.display_name} Concussions"
        title_font = _font(16, bold=True)
        tw = draw.textlength(title, font=title_font)
        draw.text((ox + (self.chart.width - tw) / 2, oy - 32), title, font=title_font, fill=TEXT)

        for group in instruction.annotation_groups:
            self._draw_box(draw, group, self._panel_x(), oy)

        if instruction.affordances.tutorial_message:
            self._draw_banner(draw, instruction, width, height)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        img.save(str(output_path), "PNG")
        self.written.append(output_path)
        logger.info(
            "Scene %d (%s) saved to %s (%dx%d)",
            instruction.scene, instruction.category.value, output_path, width, height,
        )
        return output_path

    def _draw_grid_and_axes(
        self,
        img: Image.Image,
        draw: ImageDraw.ImageDraw,
        scale: ScaleMapper,
        ox: int,
        oy: int,
        n_years: int,
    ) -> None:
        c = self.chart
        tick_font = _font(12)

        for value in scale.value_ticks(c.y_ticks):
            y = oy + scale.value_to_y(value)
            _dashed_line(draw, (ox, y), (ox + c.width, y), fill=GRID, dash=3, gap=3)
            draw.line([(ox - 6, y), (ox, y)], fill=AXIS, width=1)
            label = str(value)
            lw = draw.textlength(label, font=tick_font)
            draw.text((ox - 10 - lw, y - 7), label, font=tick_font, fill=TEXT)

        years = scale.year_ticks() if n_years else []
        for year in years:
            x = ox + scale.year_to_x(year)
            _dashed_line(draw, (x, oy), (x, oy + c.height), fill=GRID, dash=3, gap=3)
            draw.line([(x, oy + c.height), (x, oy + c.height + 6)], fill=AXIS, width=1)
            label = str(year)
            lw = draw.textlength(label, font=tick_font)
            draw.text((x - lw / 2, oy + c.height + 10), label, font=tick_font, fill=TEXT)

        # Axis lines
        draw.line([(ox, oy), (ox, oy + c.height)], fill=AXIS, width=1)
        draw.line([(ox, oy + c.height), (ox + c.width, oy + c.height)], fill=AXIS, width=1)

        # Axis labels
        label_font = _font(14, bold=True)
        xl = "Year"
        draw.text(
            (ox + (c.width - draw.textlength(xl, font=label_font)) / 2, oy + c.height + c.margin_bottom - 22),
            xl, font=label_font, fill=AXIS,
        )
        yl = "Number of Concussions"
        txt_img = Image.new("RGBA", (int(draw.textlength(yl, font=label_font)) + 4, 20), (0, 0, 0, 0))
        ImageDraw.Draw(txt_img).text((0, 0), yl, font=label_font, fill=AXIS)
        rotated = txt_img.rotate(90, expand=True)
        img.paste(rotated, (max(ox - c.margin_left + 4, 0), int(oy + (c.height - rotated.height) / 2)), rotated)

    def _draw_year_markers(
        self,
        draw: ImageDraw.ImageDraw,
        scale: ScaleMapper,
        groups: list[AnnotationGroup],
        ox: int,
        oy: int,
    ) -> None:
        for group in groups:
            x = ox + scale.year_to_x(group.year)
            _dashed_line(draw, (x, oy + MARKER_TOP), (x, oy + self.chart.height), fill=group.color, width=3)
            cy = oy + MARKER_TOP + 10
            draw.ellipse([x - 5, cy - 5, x + 5, cy + 5], fill=group.color, outline=BG, width=2)

    def _draw_series(self, draw: ImageDraw.ImageDraw, instruction: RenderInstruction, ox: int, oy: int) -> None:
        scale = instruction.scale
        series = [
            ([p.practice_count for p in instruction.data_window], self.chart.practice_color),
            ([p.game_count for p in instruction.data_window], self.chart.game_color),
            ([p.total_count for p in instruction.data_window], self.chart.total_color),
        ]
        years = [p.year for p in instruction.data_window]
        for values, color in series:
            pts = [(ox + scale.year_to_x(yr), oy + scale.value_to_y(v)) for yr, v in zip(years, values)]
            if len(pts) > 1:
                draw.line(pts, fill=color, width=3, joint="curve")
            for x, y in pts:
                draw.ellipse(
                    [x - DOT_RADIUS, y - DOT_RADIUS, x + DOT_RADIUS, y + DOT_RADIUS],
                    fill=color, outline=BG, width=2,
                )

    def _draw_legend(self, draw: ImageDraw.ImageDraw, x: float, y: float) -> None:
        font = _font(12)
        entries = [
            ("Practice", self.chart.practice_color),
            ("Games", self.chart.game_color),
            ("Total", self.chart.total_color),
        ]
        for i, (label, color) in enumerate(entries):
            top = y + i * LEGEND_ROW
            draw.rounded_rectangle([x, top, x + LEGEND_SWATCH[0], top + LEGEND_SWATCH[1]], radius=2, fill=color)
            draw.text((x + 30, top + 2), label, font=font, fill=TEXT)

    def _draw_box(self, draw: ImageDraw.ImageDraw, group: AnnotationGroup, panel_x: int, oy: int) -> None:
        lay = self.layout
        x0 = panel_x + group.box.x
        y0 = oy + group.box.y
        x1 = x0 + group.box.width
        y1 = y0 + group.box.height

        draw.rounded_rectangle([x0, y0, x1, y1], radius=BOX_RADIUS, fill=BOX_FILL, outline=BOX_BORDER)
        # Title strip: rounded top, square bottom edge
        draw.rounded_rectangle([x0, y0, x1, y0 + lay.title_height], radius=BOX_RADIUS, fill=group.color)
        draw.rectangle([x0, y0 + lay.title_height / 2, x1, y0 + lay.title_height], fill=group.color)
        draw.text((x0 + lay.top_padding, y0 + 4), str(group.year), font=_font(14, bold=True), fill=BG)

        text_font = _font(12)
        for item in group.items:
            ty = y0 + item.offset_y
            cx, cy = x0 + lay.top_padding + 6, ty + 8
            draw.ellipse([cx - 3, cy - 3, cx + 3, cy + 3], fill=item.marker_color)
            for i, line in enumerate(item.lines):
                draw.text((x0 + lay.top_padding + 18, ty + 1 + i * lay.line_height), line, font=text_font, fill=TEXT)

    def _draw_banner(self, draw: ImageDraw.ImageDraw, instruction: RenderInstruction, width: int, height: int) -> None:
        aff = instruction.affordances
        top = height - BANNER_HEIGHT
        draw.rectangle([0, top, width, height], fill=BANNER_BG)
        pad = self.chart.margin_left
        if aff.progress_label:
            draw.text((pad, top + 12), f"Tour {aff.progress_label}", font=_font(11, bold=True), fill=BANNER_DIM)
        draw.text((pad, top + 32), aff.tutorial_message or "", font=_font(13), fill=BANNER_TEXT)
        if aff.next_button_visible:
            hint = "Next >"
            hw = draw.textlength(hint, font=_font(13, bold=True))
            draw.text((width - pad - hw, top + 32), hint, font=_font(13, bold=True), fill=BANNER_TEXT)
