"""Environment based settings for the portfolio search service.

All settings are plain environment variables. A variable that is unset,
empty or whitespace-only counts as missing; a missing variable without a
default is a configuration error and raises ValueError.
"""

import logging
import os
from typing import Any, Callable

_TRUE_VALUES = ("true", "1", "yes", "on")


def _parse_number(raw: str) -> int | float:
    return float(raw) if "." in raw or "e" in raw.lower() else int(raw)


class HelperConfig:
    """Typed access to environment settings; also hands the application logger to every component."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _resolve(self, key: str, default: Any, parse: Callable[[str], Any], kind: str) -> Any:
        name = key.upper()
        raw = (os.getenv(name) or "").strip()
        if not raw:
            if default is None:
                raise ValueError(f"Setting '{name}' is required but not set.")
            return default
        try:
            return parse(raw)
        except ValueError:
            raise ValueError(f"Setting '{name}' must be a {kind}, got '{raw}'.")

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting, surrounding whitespace removed.

        Args:
            key (str): Variable name, case-insensitive (e.g. "PORTFOLIO_ENGINE").
            default (str | None): Returned when unset. None makes the setting required.

        Raises:
            ValueError: If the setting is required and unset.
        """
        return self._resolve(key, default, str, "string")

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read an int ("5") or float ("0.5") setting, e.g. SEARCH_SEMANTIC_TOP_K or EMBED_TIMEOUT."""
        return self._resolve(key, default, _parse_number, "number")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        # anything outside _TRUE_VALUES reads as False
        return self._resolve(key, default, lambda raw: raw.lower() in _TRUE_VALUES, "boolean")

    def get_logger(self) -> logging.Logger:
        return self._logger
