"""Command-line interface for Weekplate."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from weekplate.codec.plan_text import PlanImportError, clean_title, decode, encode
from weekplate.config import get_settings
from weekplate.fetch.retry import ExhaustedRetries
from weekplate.logging_utils import configure_logging
from weekplate.models.recipe import InvalidRequestError, PlanPreferences
from weekplate.parsing.shopping_list import parse_shopping_list
from weekplate.planner.session import build_session

app = typer.Typer(help="Weekplate weekly dinner planning commands.")


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        _fail(f"{path} is not UTF-8 text ({exc.reason} at byte {exc.start})")


@app.command()
def plan(
    diet: str = typer.Option("", "--diet", help="Dietary preferences, e.g. vegetarian."),
    allergies: str = typer.Option("", "--allergies", help="Allergies to avoid."),
    requirements: str = typer.Option("", "--requirements", help="Any other requirements."),
    facility: Optional[List[str]] = typer.Option(
        None,
        "--facility",
        help="Available cooking facility; repeat to limit meals to these facilities.",
    ),
    images: bool = typer.Option(False, "--images/--no-images", help="Also generate dish images."),
    as_json: bool = typer.Option(False, "--json", help="Emit the full schedule as JSON."),
) -> None:
    """
    Generate a week of dinners and print it in the plain-text plan format.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, [settings.gemini_api_key or ""])

    session = build_session(settings)
    if session.backend is None:
        _fail("set WEEKPLATE_GEMINI_API_KEY to generate plans")

    facilities = list(facility or [])
    prefs = PlanPreferences(
        dietary_preferences=diet,
        allergies=allergies,
        specific_requirements=requirements,
        limited_facilities=bool(facilities),
        facilities=facilities,
    )
    try:
        schedule = asyncio.run(session.generate(prefs, populate=images))
    except (InvalidRequestError, ExhaustedRetries) as exc:
        _fail(str(exc))
        return

    if as_json:
        typer.echo(json.dumps(schedule.model_dump(mode="json"), indent=2))
    else:
        typer.echo(encode(schedule))


@app.command("import-plan")
def import_plan(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plan text file."),
    as_json: bool = typer.Option(False, "--json", help="Emit the decoded schedule as JSON."),
) -> None:
    """Validate a plan text file and print it in canonical day order."""

    try:
        schedule = decode(_read_text(path))
    except PlanImportError as exc:
        _fail(f"Import failed: {exc}")
        return

    if as_json:
        typer.echo(json.dumps(schedule.model_dump(mode="json"), indent=2))
    else:
        typer.echo(encode(schedule))


@app.command("shopping-list")
def shopping_list(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown shopping list."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """Group a markdown shopping list into categories and print it as JSON."""

    categories = parse_shopping_list(_read_text(path))
    typer.echo(json.dumps(categories, indent=2 if pretty else None))


@app.command("clean-title")
def clean_title_command(title: str = typer.Argument(..., help="Dinner title to tidy.")) -> None:
    """Print a dinner title without parenthetical notes or quantities."""

    typer.echo(clean_title(title))


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m weekplate`."""
    app(prog_name="weekplate", args=argv)


if __name__ == "__main__":
    main()
