from __future__ import annotations
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping
from dotenv import load_dotenv

# Load .env early (no error if missing)
load_dotenv()

AUDIT_DIR_ENV = "UIC406_AUDIT_DIR"
DEFAULT_AUDIT_DIR = "audit"

INT_FIELDS = ("output_level", "min_headway", "time_window", "milp_time_limit")


def _env(name: str, default: Any) -> Any:
    def read() -> Any:
        value = os.getenv(name)
        if value is None or value.strip() == "":
            return default
        return value

    return field(default_factory=read)


def _as_int(name: str, value: Any) -> int | None:
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class CompressionConfig:
    data_dir: str = _env("UIC406_DATA_DIR", "Data")
    solution_dir: str = _env("UIC406_SOLUTION_DIR", "Solution")
    # 'ean' | 'ilp'
    method: str = _env("UIC406_METHOD", "ean")
    # 'topological' | 'stack'
    strategy: str = _env("UIC406_STRATEGY", "topological")
    # > 0 writes debug traces of the network next to the solution
    output_level: int = _env("UIC406_OUTPUT_LEVEL", 0)
    min_headway: int = _env("UIC406_MIN_HEADWAY", 6)
    # Reference window for capacity consumption; defaults to the original timetable span
    time_window: int | None = _env("UIC406_TIME_WINDOW", None)
    milp_time_limit: int | None = _env("UIC406_MILP_TIME_LIMIT", None)
    audit_dir: str = _env(AUDIT_DIR_ENV, DEFAULT_AUDIT_DIR)

    def __post_init__(self) -> None:
        # environment variables and Config.json values may arrive as strings
        for name in INT_FIELDS:
            object.__setattr__(self, name, _as_int(name, getattr(self, name)))
        object.__setattr__(self, "method", str(self.method).lower())
        object.__setattr__(self, "strategy", str(self.strategy).lower())

    def with_overrides(self, overrides: Mapping[str, Any]) -> CompressionConfig:
        known = {f.name for f in fields(self)}
        unknown = sorted(k for k in overrides if k not in known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def debug_enabled(self) -> bool:
        return self.output_level > 0
