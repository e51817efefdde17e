"""Runtime settings read from ``TICTACTOE_*`` environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name)
    if value is not None and value.strip() != "":
        return value.strip()
    return default


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Raise on illegal engine moves instead of playing the fallback cell
    strict: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_port = _env(env, "TICTACTOE_PORT", "8000")
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ValueError(f"TICTACTOE_PORT must be an integer, got {raw_port!r}") from exc
        if not 0 < port < 65536:
            raise ValueError(f"TICTACTOE_PORT out of range: {port}")
        return cls(
            host=_env(env, "TICTACTOE_HOST", cls.host),
            port=port,
            log_level=_env(env, "TICTACTOE_LOG_LEVEL", cls.log_level).upper(),
            strict=_env(env, "TICTACTOE_STRICT", "").lower() in _TRUTHY,
        )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
