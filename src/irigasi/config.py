"""Client configuration for irigasi."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from irigasi.exceptions import IrigasiConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class IrigasiConfig:
    """Telemetry client configuration.

    Parameters
    ----------
    database_url : str
        Realtime Database base URL, e.g.
        ``https://irigasi-default-rtdb.firebaseio.com``.
    auth_token : str or None
        Database secret or ID token sent as the ``auth`` query parameter.
    root_path : str
        Child of the snapshot root holding the node records.
    listen_path : str
        Database path the live listener is attached to.
    grid_lines : int
        Number of horizontal grid intervals drawn behind the chart.
    chart_padding : float
        Inset, in pixels, between the drawing surface edge and the chart.
    history_size : int
        Number of recent samples retained per metric for charting.
    connect_timeout : float
        Socket connect timeout in seconds. The stream itself never times out.
    trace_enabled : bool
        DEBUG-log every raw stream event (redacted).
    """

    database_url: str
    auth_token: str | None = None
    root_path: str = "data_mentah"
    listen_path: str = "/"
    grid_lines: int = 5
    chart_padding: float = 5.0
    history_size: int = 60
    connect_timeout: float = 30.0
    trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.database_url or not self.database_url.strip():
            raise IrigasiConfigError("database_url must be non-empty")
        if self.grid_lines <= 0:
            raise IrigasiConfigError(f"grid_lines must be positive, got {self.grid_lines}")
        if self.chart_padding < 0:
            raise IrigasiConfigError(f"chart_padding must be >= 0, got {self.chart_padding}")
        if self.history_size < 2:
            raise IrigasiConfigError(f"history_size must be >= 2, got {self.history_size}")
        # Frozen dataclass: normalise via object.__setattr__.
        object.__setattr__(self, "database_url", self.database_url.strip().rstrip("/"))
        if not self.listen_path.startswith("/"):
            object.__setattr__(self, "listen_path", f"/{self.listen_path}")

    @classmethod
    def from_env(cls, **overrides: Any) -> IrigasiConfig:
        """Create configuration from environment variables.

        Reads ``IRIGASI_DATABASE_URL`` and optional ``IRIGASI_*``
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        IrigasiConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "IRIGASI_DATABASE_URL": "database_url",
            "IRIGASI_AUTH_TOKEN": "auth_token",
            "IRIGASI_ROOT_PATH": "root_path",
            "IRIGASI_LISTEN_PATH": "listen_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "IRIGASI_GRID_LINES": ("grid_lines", int),
            "IRIGASI_CHART_PADDING": ("chart_padding", float),
            "IRIGASI_HISTORY_SIZE": ("history_size", int),
            "IRIGASI_CONNECT_TIMEOUT": ("connect_timeout", float),
        }
        for env_key, (field_name, kind) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = kind(val)
            except ValueError as exc:
                raise IrigasiConfigError(f"{env_key} is not a valid {kind.__name__}: {val!r}") from exc

        if "trace_enabled" not in overrides:
            config_kwargs["trace_enabled"] = _env_bool(env.get("IRIGASI_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        if "database_url" not in config_kwargs:
            raise IrigasiConfigError("IRIGASI_DATABASE_URL is not set")

        return cls(**config_kwargs)
