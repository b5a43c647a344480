""" Fetch configuration: defaults, JSON file and environment overrides """

import os, json, math
from dataclasses import dataclass, fields, replace
from numbers import Real
from typing import Any, Dict, Mapping, Optional

from .base import CHUNK_SIZE

DEFAULT_MAX_REDIRECTS = 10

ENV_PREFIX = "HTTPGET_"


@dataclass(frozen=True)
class FetchConfig:
    """Tunables for a fetch: redirect bound, read size and socket timeout."""
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    chunk_size: int = CHUNK_SIZE
    timeout: Optional[float] = None

    def __post_init__(self):
        """Validate the values once, at construction."""
        for name in ('max_redirects', 'chunk_size'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.timeout is not None:
            if isinstance(self.timeout, bool) or not isinstance(self.timeout, Real):
                raise ValueError(f"timeout must be a number, got {self.timeout!r}")
            if not math.isfinite(self.timeout):
                raise ValueError(f"timeout must be finite, got {self.timeout}")

        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0, got {self.max_redirects}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be > 0 or unset, got {self.timeout}")

    def merge(self, **overrides: Any) -> "FetchConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["FetchConfig"] = None) -> "FetchConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        return (base or cls()).merge(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 base: Optional["FetchConfig"] = None) -> "FetchConfig":
        """Apply HTTPGET_* environment variables on top of `base`."""
        environ = os.environ if environ is None else environ
        converters = {
            'max_redirects': int,
            'chunk_size': int,
            'timeout': float,
        }
        values: Dict[str, Any] = {}
        for name, convert in converters.items():
            env_var = ENV_PREFIX + name.upper()
            raw = environ.get(env_var)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[name] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env_var}: {raw!r}")
        return (base or cls()).merge(**values)


def load_config(path: str, base: Optional[FetchConfig] = None) -> FetchConfig:
    """Load a FetchConfig from a JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f: raw_config = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in configuration file: {e}")

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file {path} must contain a JSON object")
    return FetchConfig.from_mapping(raw_config, base=base)
