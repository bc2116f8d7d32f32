"""Import settings, with defaults and environment overrides."""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass

from custimport.errors import ConfigError

DEFAULT_BATCH_SIZE = 5000
DEFAULT_TABLE = "customers"

ENV_PREFIX = "CUSTOMER_IMPORT_"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ImportConfig:
    """Settings for one import run.

    batch_size: records per bulk insert.
    strict: abort the whole import on the first invalid row instead of skipping it.
    table: destination table name.
    upsert: update existing rows by customer_id instead of inserting duplicates.
    queue_size: when > 0, parse/transform in a producer thread feeding a
        bounded queue of this size; 0 runs everything in the calling thread.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    strict: bool = False
    table: str = DEFAULT_TABLE
    upsert: bool = False
    queue_size: int = 0
    delimiter: str = ","
    encoding: str = "utf-8-sig"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be positive, got {self.batch_size}")
        if self.queue_size < 0:
            raise ConfigError(f"queue_size must not be negative, got {self.queue_size}")
        if not _IDENTIFIER.match(self.table):
            raise ConfigError(f"Invalid table name: {self.table!r}")
        if len(self.delimiter) != 1:
            raise ConfigError(f"delimiter must be a single character, got {self.delimiter!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ImportConfig":
        """Build a config from CUSTOMER_IMPORT_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        kwargs: dict = {}
        for name, parser in _ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + name)
            if value is not None:
                kwargs[name.lower()] = parser(name, value)
        return cls(**kwargs)


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")


def _parse_str(name: str, value: str) -> str:
    return value


_ENV_FIELDS = {
    "BATCH_SIZE": _parse_int,
    "QUEUE_SIZE": _parse_int,
    "STRICT": _parse_bool,
    "UPSERT": _parse_bool,
    "TABLE": _parse_str,
}
