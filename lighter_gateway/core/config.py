"""Environment-backed settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_BASE_URL = "https://mainnet.zklighter.elliot.ai"
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_WS_INTERVAL = 2.0
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_CORS_ORIGINS = ("http://localhost:3000",)


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration for the gateway process."""

    base_url: str = DEFAULT_BASE_URL
    l1_address: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    ws_interval: float = DEFAULT_WS_INTERVAL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.ws_interval <= 0:
            raise ValueError("ws_interval must be positive")
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Empty values are treated as unset, so ``LIGHTER_L1_ADDRESS=`` in a
        ``.env`` file leaves the account endpoints unconfigured.
        """

        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        origins = _get("LIGHTER_GATEWAY_CORS_ORIGINS")
        return cls(
            base_url=_get("LIGHTER_BASE_URL") or DEFAULT_BASE_URL,
            l1_address=_get("LIGHTER_L1_ADDRESS"),
            request_timeout=float(_get("LIGHTER_REQUEST_TIMEOUT") or DEFAULT_REQUEST_TIMEOUT),
            ws_interval=float(_get("LIGHTER_GATEWAY_WS_INTERVAL") or DEFAULT_WS_INTERVAL),
            host=_get("LIGHTER_GATEWAY_HOST") or DEFAULT_HOST,
            port=int(_get("LIGHTER_GATEWAY_PORT") or DEFAULT_PORT),
            cors_origins=(
                tuple(item.strip() for item in origins.split(",") if item.strip())
                if origins
                else DEFAULT_CORS_ORIGINS
            ),
            log_level=(_get("LIGHTER_GATEWAY_LOG_LEVEL") or "INFO").upper(),
        )
