#!/usr/bin/env python3
"""
growthcalc CLI

Command-line interface for BMI, BMI-for-age percentiles and growth trends.
"""

import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()


def setup_paths():
    """Add the project root to sys.path for imports."""
    root = Path(__file__).parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


setup_paths()

from growthcalc.config import LOG_LEVELS, GrowthConfig
from growthcalc.errors import GrowthError
from growthcalc.log import setup_logging

CATEGORY_STYLES = {
    "underweight": "red",
    "healthy": "green",
    "overweight": "yellow",
    "obese": "red",
}


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def _format_optional(value: Optional[float], fmt: str) -> str:
    return "-" if value is None else format(value, fmt)


def _load_series(path: Path) -> list:
    """Read dated measurements from a JSON list or {"measurements": [...]}."""
    from growthcalc.models import DatedMeasurement

    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("measurements", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of measurements")
    return [DatedMeasurement.model_validate(item) for item in data]


@click.group()
@click.version_option(version="0.1.0", prog_name="growthcalc")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default=None, help="Log level (default from GROWTH_LOG_LEVEL)")
def cli(log_level: Optional[str]):
    """
    growthcalc - BMI and growth-chart percentile calculator

    Classifies BMI for adults and BMI-for-age percentiles for children
    using CDC 2000 LMS reference data.
    """
    config = GrowthConfig(log_level=log_level)
    try:
        config.validate()
    except ValueError as e:
        _fail(str(e))
    setup_logging(config.log_level)


@cli.command()
@click.option("--height", "height_cm", type=float, required=True, help="Height in cm")
@click.option("--weight", "weight_kg", type=float, required=True, help="Weight in kg")
@click.option("--age", "age_years", type=float, required=True, help="Age in years (fractional allowed)")
@click.option("--sex", type=click.Choice(["male", "female", "other"], case_sensitive=False), required=True,
              help="Sex of the subject")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def bmi(height_cm: float, weight_kg: float, age_years: float, sex: str, as_json: bool):
    """
    Calculate and classify BMI for one measurement.

    Examples:

        growthcalc bmi --height 128 --weight 25 --age 8 --sex female

        growthcalc bmi --height 175 --weight 70 --age 34 --sex male --json
    """
    from growthcalc.engines import get_default_engine

    try:
        result = get_default_engine().evaluate(height_cm, weight_kg, age_years, sex)
    except GrowthError as e:
        _fail(str(e))

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    info = result.category_info
    style = CATEGORY_STYLES.get(info.category.value, "white")
    lines = [f"BMI: [bold]{result.bmi:.1f}[/bold]"]
    if result.is_child:
        lines.append(f"Percentile: {result.percentile:.1f} (z = {result.z_score:+.2f})")
    lines.append(f"Category: [{style}]{info.label}[/{style}]")
    lines.append(f"[dim]{info.description}[/dim]")
    lines.append("")
    lines.append(info.recommendation)

    console.print(Panel(
        "\n".join(lines),
        title="BMI-for-age" if result.is_child else "Adult BMI",
        border_style=style,
    ))


@cli.command()
@click.argument("series_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), help="First date to include")
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Last date to include")
@click.option("--json", "as_json", is_flag=True, help="Print the trend as JSON")
def trend(series_path: str, start, end, as_json: bool):
    """
    Build a growth trend from a JSON file of dated measurements.

    The file holds a list (or {"measurements": [...]}) of objects with
    date, height_cm, weight_kg, age_years, sex and optional notes, oldest
    first.

    Example:

        growthcalc trend ./measurements.json --start 2024-01-01
    """
    from growthcalc.engines import build_trend, get_default_engine

    try:
        series = _load_series(Path(series_path))
    except (ValueError, ValidationError) as e:
        _fail(f"Invalid measurement file: {e}")

    start_date: Optional[date] = start.date() if start else None
    end_date: Optional[date] = end.date() if end else None

    try:
        growth = build_trend(get_default_engine(), series, start=start_date, end=end_date)
    except GrowthError as e:
        _fail(str(e))

    if as_json:
        click.echo(growth.model_dump_json(indent=2))
        return

    if not growth.points:
        console.print("[dim]No measurements[/dim]")
        return

    table = Table(title="Growth Trend")
    table.add_column("Date")
    table.add_column("Height (cm)", justify="right")
    table.add_column("Weight (kg)", justify="right")
    table.add_column("BMI", justify="right")
    table.add_column("Percentile", justify="right")
    table.add_column("Category")

    for point in growth.points:
        info = point.result.category_info
        style = CATEGORY_STYLES.get(info.category.value, "white")
        table.add_row(
            point.date.isoformat(),
            f"{point.height_cm:.1f}",
            f"{point.weight_kg:.1f}",
            f"{point.bmi:.1f}",
            _format_optional(point.result.percentile, ".1f"),
            f"[{style}]{info.label}[/{style}]",
        )
    console.print(table)

    console.print("\n[bold]Change:[/bold]")
    for name, unit in (("height", "cm"), ("weight", "kg"), ("bmi", "")):
        metric = getattr(growth.summary, name)
        console.print(
            f"  {name.upper() if name == 'bmi' else name.title()}: "
            f"{metric.first:.1f} -> {metric.latest:.1f} ({metric.delta:+.1f}{' ' + unit if unit else ''})"
        )


@cli.command()
@click.option("--sex", type=click.Choice(["male", "female", "other"], case_sensitive=False), required=True)
@click.option("--measure", type=click.Choice(["bmi", "weight", "height"]), default="bmi",
              help="Reference measure")
@click.option("--percentiles", type=str, default="5,50,85,95", help="Comma-separated percentiles")
def reference(sex: str, measure: str, percentiles: str):
    """
    Show the reference curve for a sex.

    Example:

        growthcalc reference --sex female --percentiles 5,50,95
    """
    from growthcalc.engines import get_default_engine

    try:
        levels = [float(p) for p in percentiles.split(",") if p.strip()]
    except ValueError:
        _fail(f"Invalid percentiles: {percentiles}")

    try:
        curve = get_default_engine().reference_curve(sex, levels, measure)
    except (GrowthError, ValueError) as e:
        _fail(str(e))

    table = Table(title=f"{measure.upper() if measure == 'bmi' else measure.title()}-for-age ({sex})")
    table.add_column("Age (years)", justify="right")
    for p in levels:
        table.add_column(f"P{p:g}", justify="right")

    for point in curve:
        table.add_row(
            f"{point['age_months'] / 12:g}",
            *(f"{point[f'p{p:g}']:.1f}" for p in levels),
        )
    console.print(table)


@cli.command()
@click.option("--data-dir", type=click.Path(exists=True, file_okay=False), help="Reference data directory")
def validate(data_dir: Optional[str]):
    """
    Load and validate reference data.
    """
    from growthcalc.engines import load_category_scheme, load_reference_store

    config = GrowthConfig(reference_dir=data_dir)
    try:
        store = load_reference_store(config.reference_dir, config.other_sex_reference)
        load_category_scheme()
    except GrowthError as e:
        _fail(f"Reference data is corrupt: {e}")

    for measure, table in store.tables.items():
        low, high = table.age_range("male")
        console.print(
            f"[green]✓[/green] {measure.value}: {len(table.rows_for('male'))} male / "
            f"{len(table.rows_for('female'))} female rows, {low:g}-{high:g} months"
        )
    console.print(f"[green]✓ Reference data is valid[/green] (sex 'other' uses: {config.other_sex_reference})")


@cli.command()
def info():
    """
    Show information about growthcalc.
    """
    console.print(Panel(
        "[bold]growthcalc[/bold]\n\n"
        "Growth-standard BMI engine for:\n"
        "• Adult BMI classification (WHO thresholds, age 20+)\n"
        "• BMI-for-age percentiles and z-scores (CDC 2000 LMS, age 2-20)\n"
        "• Growth trends over dated measurements\n\n"
        "[dim]Descriptive classification only; not a medical diagnosis.[/dim]",
        title="About",
        border_style="blue",
    ))

    from growthcalc.engines.classifier import default_scheme

    scheme = default_scheme()
    cutoffs = Table(title="Category cut-offs (lower bound)")
    cutoffs.add_column("Category")
    cutoffs.add_column("Adult BMI", justify="right")
    cutoffs.add_column("Child percentile", justify="right")
    adult = scheme.thresholds("adult")
    child = scheme.thresholds("child")
    for category in adult:
        cutoffs.add_row(category, _format_optional(adult[category], "g"), _format_optional(child[category], "g"))
    console.print(cutoffs)

    console.print("\n[bold]Quick Start:[/bold]")
    console.print("  growthcalc bmi --height 128 --weight 25 --age 8 --sex female")
    console.print("  growthcalc trend ./measurements.json")
    console.print("  growthcalc reference --sex male")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
