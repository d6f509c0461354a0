from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_sun_times(payload: Dict[str, Any]) -> None:
    echo_heading("Sun Times")
    echo_key_values(
        [
            ("sunrise", payload.get("sunrise")),
            ("sunset", payload.get("sunset")),
            ("day_length", payload.get("day_length")),
            ("is_daylight", payload.get("is_daylight")),
        ]
    )


def render_event(payload: Dict[str, Any]) -> None:
    echo_heading("Next Sun Event")
    echo_key_values(
        [
            ("event", payload.get("event")),
            ("time", payload.get("time")),
            ("is_daylight", payload.get("is_daylight")),
        ]
    )


def render_summary(payload: Dict[str, Any]) -> None:
    echo_heading("Observation Summary")
    echo_key_values(
        [
            ("station", payload.get("station")),
            ("recorded_at", payload.get("recorded_at")),
            ("data_age", payload.get("data_age")),
            ("is_fresh", payload.get("is_fresh")),
            ("valid_timestamp_count", payload.get("valid_timestamp_count")),
        ]
    )
    if payload.get("degraded"):
        typer.secho(
            "No valid timestamps in payload; recorded_at is a synthetic recent time.",
            fg=typer.colors.YELLOW,
        )

    sun_times = payload.get("sun_times")
    typer.echo()
    if sun_times:
        render_sun_times(sun_times)
    else:
        echo_heading("Sun Times")
        typer.echo("Station has no location configured.")
