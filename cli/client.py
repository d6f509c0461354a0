from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer
from pydantic import ValidationError

from cli.config import CLIConfig
from models.weather import WeatherStationResponse


class ApiClient:
    """Minimal HTTP client for the station normalizer service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_sun_times(
        self,
        latitude: float,
        longitude: float,
        timezone: str,
        day: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone,
        }
        if day:
            params["date"] = day
        return self._get("/sun-times", params)

    def get_next_event(self, latitude: float, longitude: float, timezone: str) -> Dict[str, Any]:
        return self._get(
            "/sun-times/next-event",
            {"latitude": latitude, "longitude": longitude, "timezone": timezone},
        )

    def summarize(self, station_path: Path, payload_path: Path) -> Dict[str, Any]:
        body = {
            "station": self._read_json(station_path),
            "payload": self._unwrap_payload(self._read_json(payload_path)),
        }
        try:
            response = self._client.post("/observations/summary", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"File {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise typer.BadParameter(f"File {path} must contain a JSON object.")
        return data

    @staticmethod
    def _unwrap_payload(data: Dict[str, Any]) -> Dict[str, Any]:
        # Raw API responses wrap the sensor groups in a {"code", "msg", "data"} envelope.
        if "data" not in data:
            return data
        try:
            envelope = WeatherStationResponse.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"Payload envelope is not valid station data: {exc}") from exc
        return envelope.data.model_dump(by_alias=True, exclude_none=True)

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
