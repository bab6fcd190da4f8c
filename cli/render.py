from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def _number(value: Any) -> str:
    if isinstance(value, (int, float)):
        return f"{value:.2f}"
    return str(value)


def render_buckets(title: str, rows: Iterable[Dict[str, Any]]) -> None:
    rows = list(rows)
    echo_heading(title)
    if not rows:
        typer.echo("No readings in range.")
        return

    width = max(len(str(row.get("DateTime", ""))) for row in rows)
    typer.echo(f"{'Bucket':<{width}}  {'Temperature':>11}  {'Humidity':>8}")
    for row in rows:
        typer.echo(
            f"{str(row.get('DateTime')):<{width}}  "
            f"{_number(row.get('Temperature')):>11}  "
            f"{_number(row.get('Humidity')):>8}"
        )


def render_series(field: str, rows: Iterable[Dict[str, Any]], limit: Optional[int] = None) -> None:
    rows = list(rows)
    echo_heading(f"{field.capitalize()} samples ({len(rows)})")
    shown = rows[-limit:] if limit else rows
    for row in shown:
        typer.echo(f"{row.get('DateTime')}  {_number(row.get('Value'))}")
