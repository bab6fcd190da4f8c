from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_buckets, render_series


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Query averaged temperature and humidity from the watcher service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("range")
def range_command(
    ctx: typer.Context,
    start_date: str = typer.Argument(..., help="First day, e.g. 2024-03-01."),
    end_date: str = typer.Argument(..., help="Last day (inclusive)."),
    step: str = typer.Option("day", "--step", "-s", help="hour, day or month."),
) -> None:
    """Average readings between two dates."""
    state = _get_state(ctx)
    rows = state.client.get_range(start_date, end_date, step)
    render_buckets(f"{start_date} .. {end_date} by {step}", rows)


@app.command("window")
def window_command(
    ctx: typer.Context,
    window: str = typer.Argument(
        ..., help="last12hours, lastday, lastweek, lastmonth or lastyear."
    ),
) -> None:
    """Average readings over a window ending now."""
    state = _get_state(ctx)
    rows = state.client.get_window(window)
    render_buckets(window, rows)


@app.command("series")
def series_command(
    ctx: typer.Context,
    field: str = typer.Argument(..., help="temperature or humidity."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Only print the most recent N samples."
    ),
) -> None:
    """Print raw samples of one field."""
    state = _get_state(ctx)
    rows = state.client.get_series(field)
    render_series(field, rows, limit=limit)
