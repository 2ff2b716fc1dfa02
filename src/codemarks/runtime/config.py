"""Environment-driven settings for marks and logging.

Every knob reads a ``CODEMARKS_``-prefixed environment variable. Values that
fail validation fall back to their defaults instead of failing startup.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = "CODEMARKS_"

DEFAULT_LOCAL_MARK_COLOR = "#37b24d"
DEFAULT_GLOBAL_MARK_COLOR = "#f59f00"
DEFAULT_LOGGER_NAME = "codemarks"
DEFAULT_BUFFER_SIZE = 2048

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
_TRUTHY = {"1", "true", "yes", "on"}


def env(
    name: str,
    default: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{name}", default)


def env_flag(
    name: str, default: bool, *, environ: Optional[Mapping[str, str]] = None
) -> bool:
    raw = env(name, environ=environ)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(
    name: str, default: int, *, environ: Optional[Mapping[str, str]] = None
) -> int:
    raw = env(name, environ=environ)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def normalize_color(value: Optional[str], fallback: str) -> str:
    """Return ``value`` when it is a ``#rgb``/``#rrggbb`` colour, else ``fallback``."""

    if value is None:
        return fallback
    candidate = value.strip()
    if _HEX_COLOR.match(candidate):
        return candidate.lower()
    return fallback


@dataclass(frozen=True, slots=True)
class MarkSettings:
    """Colours used to underline local and global marks."""

    local_mark_color: str = DEFAULT_LOCAL_MARK_COLOR
    global_mark_color: str = DEFAULT_GLOBAL_MARK_COLOR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MarkSettings":
        return cls(
            local_mark_color=normalize_color(
                env("LOCAL_MARK_COLOR", environ=environ), DEFAULT_LOCAL_MARK_COLOR
            ),
            global_mark_color=normalize_color(
                env("GLOBAL_MARK_COLOR", environ=environ), DEFAULT_GLOBAL_MARK_COLOR
            ),
        )

    def replace(self, **changes: str) -> "MarkSettings":
        unknown = set(changes) - {"local_mark_color", "global_mark_color"}
        if unknown:
            raise TypeError(f"Unknown mark settings: {sorted(unknown)}")
        validated = {
            key: normalize_color(value, getattr(self, key))
            for key, value in changes.items()
        }
        return replace(self, **validated)


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    """Logging knobs consumed by :mod:`codemarks.runtime.telemetry`."""

    logger_name: str = DEFAULT_LOGGER_NAME
    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False
    console: bool = True
    colored: bool = True
    buffered: bool = False
    buffer_size: int = DEFAULT_BUFFER_SIZE

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "LoggingSettings":
        return cls(
            logger_name=env("LOGGER", environ=environ) or DEFAULT_LOGGER_NAME,
            level=(env("LOG_LEVEL", environ=environ) or "INFO").upper(),
            log_file=env("LOG_FILE", environ=environ) or "",
            json_format=env_flag("LOG_JSON", False, environ=environ),
            console=not env_flag("DISABLE_CONSOLE", False, environ=environ),
            colored=not env_flag("NO_COLOR", False, environ=environ),
            buffered=env_flag("LOG_BUFFERED", False, environ=environ),
            buffer_size=env_int("LOG_BUFFER_SIZE", DEFAULT_BUFFER_SIZE, environ=environ),
        )


__all__ = [
    "ENV_PREFIX",
    "DEFAULT_LOCAL_MARK_COLOR",
    "DEFAULT_GLOBAL_MARK_COLOR",
    "LoggingSettings",
    "MarkSettings",
    "env",
    "env_flag",
    "env_int",
    "normalize_color",
]
