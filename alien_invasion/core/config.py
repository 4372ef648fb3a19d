"""
Configuration system for the Alien Invasion Simulator.

Provides a hierarchical dataclass-based config with JSON serialization,
validation, and sensible defaults for all simulation parameters.
"""

from __future__ import annotations

import json
import logging
import warnings
from copy import deepcopy
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Sub-config dataclasses (grouped by domain)
# ---------------------------------------------------------------------------

@dataclass
class WorldConfig:
    """Map source and random seed."""
    map_path: Optional[str] = None
    seed: Optional[int] = None  # None = fresh entropy every run

    def validate(self) -> list[str]:
        errors = []
        if self.seed is not None and self.seed < 0:
            errors.append(f"world.seed must be >= 0 or null, got {self.seed}")
        return errors


@dataclass
class PopulationConfig:
    """Initial alien population."""
    alien_count: int = 10

    def validate(self) -> list[str]:
        errors = []
        if self.alien_count < 1:
            errors.append(f"population.alien_count must be >= 1, got {self.alien_count}")
        return errors


@dataclass
class SimulationConfig:
    """Round-stepping limits."""
    max_moves_per_alien: int = 10_000
    max_rounds: Optional[int] = None  # None = run until the engine stops

    def validate(self) -> list[str]:
        errors = []
        if self.max_moves_per_alien < 1:
            errors.append(
                f"simulation.max_moves_per_alien must be >= 1, got {self.max_moves_per_alien}"
            )
        if self.max_rounds is not None and self.max_rounds < 1:
            errors.append(f"simulation.max_rounds must be >= 1 or null, got {self.max_rounds}")
        return errors


@dataclass
class MapGenConfig:
    """Random map generator settings."""
    city_count: int = 20
    min_name_length: int = 3
    max_name_length: int = 6
    max_name_attempts: int = 1000

    def validate(self) -> list[str]:
        errors = []
        if self.city_count < 1:
            errors.append(f"mapgen.city_count must be >= 1, got {self.city_count}")
        if self.min_name_length < 1:
            errors.append(f"mapgen.min_name_length must be >= 1, got {self.min_name_length}")
        if self.max_name_length < self.min_name_length:
            errors.append("mapgen.max_name_length must be >= min_name_length")
        if self.max_name_attempts < 1:
            errors.append(f"mapgen.max_name_attempts must be >= 1, got {self.max_name_attempts}")
        return errors


@dataclass
class LogConfig:
    """Console logging settings."""
    level: str = "INFO"
    format: str = "%(message)s"

    def validate(self) -> list[str]:
        errors = []
        if not isinstance(logging.getLevelName(self.level.upper()), int):
            errors.append(f"logging.level unknown: '{self.level}'")
        return errors


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class InvasionConfig:
    """
    Top-level simulation configuration.

    Load from JSON with `load_config()`, validate with `validate()`.
    """
    world: WorldConfig = field(default_factory=WorldConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    mapgen: MapGenConfig = field(default_factory=MapGenConfig)
    logging: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> list[str]:
        """Validate all config sections. Returns list of error messages (empty = valid)."""
        errors = []
        for f in fields(self):
            sub = getattr(self, f.name)
            if hasattr(sub, "validate"):
                errors.extend(sub.validate())
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dict for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InvasionConfig:
        """Create InvasionConfig from nested dict, merging with defaults."""
        config = cls()
        _merge_into_dataclass(config, data)
        return config

    def copy(self) -> InvasionConfig:
        """Deep copy of this config."""
        return deepcopy(self)


# ---------------------------------------------------------------------------
# JSON I/O helpers
# ---------------------------------------------------------------------------

def _merge_into_dataclass(target: Any, source: dict[str, Any]) -> None:
    """
    Recursively merge a dict into a dataclass instance.
    Unknown keys emit a warning but don't raise.
    """
    if not isinstance(source, dict):
        return

    known_fields = {f.name for f in fields(target)}
    for key, value in source.items():
        if key not in known_fields:
            warnings.warn(
                f"Unknown config key '{key}' in section {type(target).__name__} - ignored.",
                UserWarning,
                stacklevel=3,
            )
            continue

        current = getattr(target, key)

        if hasattr(current, "__dataclass_fields__") and isinstance(value, dict):
            _merge_into_dataclass(current, value)
        else:
            setattr(target, key, value)


def load_config(path: str | Path) -> InvasionConfig:
    """
    Load config from a JSON file. Missing fields use defaults.

    Args:
        path: Path to JSON config file.

    Returns:
        Validated InvasionConfig instance.

    Raises:
        FileNotFoundError: If path doesn't exist.
        json.JSONDecodeError: If JSON is malformed.
        ValueError: If config values are invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    config = InvasionConfig.from_dict(data)

    errors = config.validate()
    if errors:
        msg = "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(msg)

    return config


def save_config(config: InvasionConfig, path: str | Path) -> None:
    """Save config to JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)


def get_default_config() -> InvasionConfig:
    """Return a fresh default config (all defaults, validated)."""
    config = InvasionConfig()
    errors = config.validate()
    assert not errors, f"Default config is invalid: {errors}"
    return config


def apply_param_override(config: InvasionConfig, dotted_key: str, value: Any) -> None:
    """
    Apply a single parameter override using dot notation.

    Example:
        apply_param_override(config, "population.alien_count", 1000)

    Raises:
        KeyError: If the path doesn't exist.
    """
    parts = dotted_key.split(".")
    obj = config
    for part in parts[:-1]:
        if not hasattr(obj, part):
            raise KeyError(f"Config path '{dotted_key}' invalid: '{part}' not found in {type(obj).__name__}")
        obj = getattr(obj, part)

    final_key = parts[-1]
    if not hasattr(obj, final_key):
        raise KeyError(f"Config path '{dotted_key}' invalid: '{final_key}' not found in {type(obj).__name__}")

    setattr(obj, final_key, value)


def configure_logging(config: InvasionConfig, level: Optional[str] = None) -> None:
    """Set up root console logging from the config's logging section."""
    logging.basicConfig(
        level=(level or config.logging.level).upper(),
        format=config.logging.format,
        force=True,
    )
