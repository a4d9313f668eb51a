from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .colors import parse_css_color, rgb_to_hex
from .discover import choose_image, find_images
from .errors import ThemifyError
from .io import write_result_json
from .pipeline import ThemePipeline, ThemeResult
from .stylesheet import find_stylesheet
from .theme import AssignerConfig

logger = logging.getLogger("themify")


def _add_theme_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-colors",
        type=int,
        default=8,
        help="Maximum number of colors to extract from a raster image.",
    )
    parser.add_argument(
        "--min-contrast",
        type=float,
        default=4.5,
        help="Target WCAG contrast ratio for text roles.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the randomized border radius. Random if omitted.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of using the fallback color when no colors are usable.",
    )
    parser.add_argument(
        "--out",
        default=None,
        help="Optional JSON output path for the generated theme.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="themify",
        description="Theme a web project using colors extracted from an image.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser(
        "apply",
        help="Extract colors from an image and write them into globals.css.",
    )
    apply.add_argument(
        "--image",
        default=None,
        help="Path to the source image. If omitted, pick one from public/.",
    )
    apply.add_argument(
        "--project-root",
        default=".",
        help="Project root containing public/ and the stylesheet.",
    )
    apply.add_argument(
        "--css",
        default=None,
        help="Stylesheet to update. Defaults to the first globals.css found.",
    )
    _add_theme_options(apply)

    preview = subparsers.add_parser(
        "preview",
        help="Print the theme an image would produce without writing anything.",
    )
    preview.add_argument(
        "--image", required=True, help="Path or URL to the source image."
    )
    _add_theme_options(preview)

    return parser


def _configure_logging(verbose: bool, console: Console) -> None:
    handler = RichHandler(console=console, show_path=False, show_time=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _build_pipeline(args: argparse.Namespace) -> ThemePipeline:
    config = AssignerConfig(min_contrast=args.min_contrast)
    if args.strict:
        config = replace(config, fallback=None)
    return ThemePipeline(
        assigner_config=config, max_colors=args.max_colors, seed=args.seed
    )


def _theme_table(result: ThemeResult) -> Table:
    table = Table(
        title=f"{'Dark' if result.theme.is_dark else 'Light'} theme from {result.source}"
    )
    table.add_column("Variable", style="yellow")
    table.add_column("Value")
    table.add_column("Swatch")
    for name, value in result.theme.variables.items():
        rgb = parse_css_color(value)
        swatch = Text("      ", style=Style(bgcolor=rgb_to_hex(rgb))) if rgb else Text("")
        table.add_row(name, value, swatch)
    return table


def _run_apply(args: argparse.Namespace, console: Console, err_console: Console) -> int:
    project_root = Path(args.project_root)
    if args.image:
        image_path = Path(args.image)
    else:
        public_dir = project_root / "public"
        images = find_images(public_dir)
        image_path = choose_image(images, console, relative_to=public_dir)

    stylesheet = find_stylesheet(project_root, args.css)
    pipeline = _build_pipeline(args)
    with err_console.status(f"Extracting colors from {image_path}..."):
        result = pipeline.run(image_path, stylesheet_path=stylesheet)

    console.print("\n[green]Theme updated successfully![/green]")
    console.print(_theme_table(result))
    console.print(
        f"[cyan]A backup of the original stylesheet was written to {result.backup}[/cyan]"
    )
    if args.out:
        write_result_json(result, args.out)
    return 0


def _run_preview(args: argparse.Namespace, console: Console, err_console: Console) -> int:
    pipeline = _build_pipeline(args)
    with err_console.status(f"Extracting colors from {args.image}..."):
        result = pipeline.build(args.image)

    if args.out:
        write_result_json(result, args.out)
        console.print(_theme_table(result))
    else:
        print(json.dumps(result.to_dict(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    console = Console()
    err_console = Console(stderr=True)
    _configure_logging(args.verbose, err_console)

    try:
        if args.command == "apply":
            return _run_apply(args, console, err_console)
        if args.command == "preview":
            return _run_preview(args, console, err_console)
    except ThemifyError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1
    except OSError as exc:
        logger.debug("I/O failure", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1
    except KeyboardInterrupt:
        err_console.print("[yellow]Aborted.[/yellow]")
        return 130

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
