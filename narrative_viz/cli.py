"""CLI entry point for the narrative chart."""

import argparse
import json
import logging
import sys
from pathlib import Path

from narrative_viz.config import load_config
from narrative_viz.models import Category, SceneId
from narrative_viz.navigation.affordances import Affordances
from narrative_viz.navigation.timers import ManualScheduler
from narrative_viz.output.png_renderer import PngRenderer
from narrative_viz.session import InitializationError, open_session

logger = logging.getLogger(__name__)

# Guard against a step that never advances
MAX_TOUR_ROUNDS = 100


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--data", type=Path, default=None, help="CSV dataset (defaults to config data_path)")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")


def _scene_arg(value: str) -> SceneId:
    try:
        return SceneId(int(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"scene must be 1-4, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Narrative concussion chart")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    scenes_parser = sub.add_parser("scenes", help="List scenes and their year ranges")
    _add_common(scenes_parser)

    layout_parser = sub.add_parser("layout", help="Print annotation box geometry as JSON")
    _add_common(layout_parser)
    layout_parser.add_argument("--scene", type=_scene_arg, default=SceneId.SCENE1)

    render_parser = sub.add_parser("render", help="Render one scene to PNG")
    _add_common(render_parser)
    render_parser.add_argument("--scene", type=_scene_arg, default=SceneId.SCENE3)
    render_parser.add_argument(
        "--category", choices=[c.value for c in Category], default=None,
        help="Data category (defaults to config default_category)",
    )
    render_parser.add_argument("--output", type=Path, default=None, help="PNG path")

    tour_parser = sub.add_parser("tour", help="Walk the tutorial and render every pass")
    _add_common(tour_parser)
    tour_parser.add_argument("--output-dir", type=Path, default=None)

    return parser


def _print_affordances(aff: Affordances) -> None:
    if aff.tutorial_message:
        print(f"[{aff.progress_label}] {aff.tutorial_message}")


def run_tour(session, scheduler: ManualScheduler) -> int:
    """Drive the tour like a user who always does what the current step asks."""
    rounds = 0
    while session.state.tutorial_active and rounds < MAX_TOUR_ROUNDS:
        rounds += 1
        step = session.tutorial.current_step
        if step is None:
            break
        if step.needs_dismissal:
            session.advance_tutorial()
        else:
            session.go_to(step.advance_on_scene)
            scheduler.run_all()
    return rounds


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    config = load_config(args.config)
    if args.command in ("scenes", "layout", "render"):
        # Direct views skip the tour
        config.tutorial.enabled = False

    scheduler = ManualScheduler()
    renderer: PngRenderer | None = None
    if args.command == "tour":
        renderer = PngRenderer(args.output_dir or config.resolved_output_dir / "tour", config)

    try:
        session = open_session(
            config,
            data_path=args.data,
            scheduler=scheduler,
            render_sink=renderer,
            on_affordances=_print_affordances if args.command == "tour" else None,
        )
    except InitializationError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.command == "scenes":
        for scene in session.scenes.values():
            lo, hi = scene.year_range
            print(f"  {int(scene.id)}. {scene.label}: {lo}-{hi}, {len(scene.annotations)} annotations")

    elif args.command == "layout":
        instruction = session.go_to(args.scene)
        groups = [
            {
                "year": g.year,
                "color": g.color,
                "box": {"x": g.box.x, "y": g.box.y, "width": g.box.width, "height": g.box.height},
                "items": [
                    {"kind": i.annotation.kind, "marker": i.marker_color, "lines": list(i.lines)}
                    for i in g.items
                ],
            }
            for g in instruction.annotation_groups
        ]
        print(json.dumps(groups, indent=2))

    elif args.command == "render":
        if args.category:
            session.set_category(args.category)
        instruction = session.go_to(args.scene)
        output = args.output or (
            config.resolved_output_dir
            / f"scene{int(args.scene)}_{instruction.category.value}.png"
        )
        path = PngRenderer(output.parent, config).render(instruction, output)
        print(f"Output: {path}")

    elif args.command == "tour":
        _print_affordances(session.affordances)
        rounds = run_tour(session, scheduler)
        if session.state.tutorial_active:
            print(f"Tour stopped after {rounds} rounds", file=sys.stderr)
            return 1
        session.go_to(SceneId.EXPLORE)
        print(f"\nTour complete: {len(renderer.written)} frames in {renderer.output_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
