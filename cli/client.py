from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig

_SERIES_PATHS = {
    "temperature": "/indicators/GetAllTemperatureData",
    "humidity": "/indicators/GetAllHumidityData",
}


class ApiClient:
    """Minimal HTTP client for the indicators API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_range(self, start_date: str, end_date: str, step: str) -> List[Dict[str, Any]]:
        return self._get_list(
            "/indicators",
            params={"startDate": start_date, "endDate": end_date, "step": step},
        )

    def get_window(self, window: str) -> List[Dict[str, Any]]:
        return self._get_list("/indicators/GetData", params={"param": window})

    def get_series(self, field: str) -> List[Dict[str, Any]]:
        path = _SERIES_PATHS.get(field.lower())
        if path is None:
            raise typer.BadParameter(
                f"Unknown series {field!r}; expected one of: {', '.join(_SERIES_PATHS)}."
            )
        return self._get_list(path)

    def _get_list(
        self, path: str, params: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        payload = response.json()
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise typer.BadParameter(f"Unexpected response payload from {path}.")
        return payload

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
