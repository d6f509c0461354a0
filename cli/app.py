from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_event, render_summary, render_sun_times


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the station normalizer service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
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


@app.command("sun-times")
def sun_times_command(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Latitude in decimal degrees."),
    longitude: float = typer.Argument(..., help="Longitude in decimal degrees."),
    timezone: str = typer.Option("UTC", "--timezone", "-z", help="IANA time zone identifier."),
    day: Optional[str] = typer.Option(None, "--date", help="Civil date (YYYY-MM-DD); defaults to today."),
) -> None:
    """Show sunrise, sunset and day length."""
    state = _get_state(ctx)
    payload = state.client.get_sun_times(latitude, longitude, timezone, day)
    render_sun_times(payload)


@app.command("next-event")
def next_event_command(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Latitude in decimal degrees."),
    longitude: float = typer.Argument(..., help="Longitude in decimal degrees."),
    timezone: str = typer.Option("UTC", "--timezone", "-z", help="IANA time zone identifier."),
) -> None:
    """Show the next sunrise or sunset."""
    state = _get_state(ctx)
    payload = state.client.get_next_event(latitude, longitude, timezone)
    render_event(payload)


@app.command("summary")
def summary_command(
    ctx: typer.Context,
    station: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Station JSON file."),
    payload: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Real-time payload JSON file."),
) -> None:
    """Normalize a saved station payload and show its freshness."""
    state = _get_state(ctx)
    typer.echo(f"Summarizing {payload} via {state.config.base_url} ...")
    result = state.client.summarize(station, payload)
    typer.echo()
    render_summary(result)
