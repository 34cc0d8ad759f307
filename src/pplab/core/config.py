"""
Configuration Management for PPLab

Every calculator uses PPLabConfig() unless handed a config. load_config()
builds one from sources the caller names explicitly, in this order:
1. Default values
2. A configuration file (YAML, TOML, JSON)
3. PPLAB_* variables of an environment mapping

The defaults reproduce the published rating model; changing them is meant
for experimentation with the model, not for everyday use.
"""

import json
import logging
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pplab.core.constants import (
    ASSUMED_SLIDER_RADIUS,
    FC_PROBABILITY_THRESHOLD,
    KINEMATIC_ROOT_TOLERANCE,
    MAXIMUM_SLIDER_RADIUS,
    MIN_DELTA_TIME,
    PERFORMANCE_MULTIPLIER,
    ROOT_MAX_ITERATIONS,
    SKILL_ROOT_TOLERANCE,
    TERMINAL_NOTE_TIME,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class PreprocessingConfig:
    """Configuration for turning hit objects into difficulty samples."""

    # Floor for the time between two objects, in ms
    min_delta_time: float = MIN_DELTA_TIME

    # Slider follow circle radii, in circle radii
    maximum_slider_radius: float = MAXIMUM_SLIDER_RADIUS
    assumed_slider_radius: float = ASSUMED_SLIDER_RADIUS


@dataclass
class SolverConfig:
    """Configuration for Brent root finding."""

    # Absolute tolerance when solving cursor crossing times (ms)
    kinematic_tolerance: float = KINEMATIC_ROOT_TOLERANCE
    # Absolute tolerance when solving the skill level
    skill_tolerance: float = SKILL_ROOT_TOLERANCE
    max_iterations: int = ROOT_MAX_ITERATIONS


@dataclass
class SkillConfig:
    """Configuration for skill aggregation."""

    # Skill level is defined as the skill that full combos with this probability
    fc_probability_threshold: float = FC_PROBABILITY_THRESHOLD
    # Time spent in the last object of a map while leaving it (ms)
    terminal_note_time: float = TERMINAL_NOTE_TIME


@dataclass
class PerformanceConfig:
    """Configuration for performance calculation."""

    # Global multiplier on the summed contributions
    multiplier: float = PERFORMANCE_MULTIPLIER


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class PPLabConfig:
    """Main configuration container."""

    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    skill: SkillConfig = field(default_factory=SkillConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


_SECTIONS = ("preprocessing", "solver", "skill", "performance", "logging")

# Environment variable -> (section, key, converter)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "PPLAB_LOG_LEVEL": ("logging", "level", str),
    "PPLAB_LOG_FILE": ("logging", "file", str),
    "PPLAB_MIN_DELTA_TIME": ("preprocessing", "min_delta_time", float),
    "PPLAB_KINEMATIC_TOLERANCE": ("solver", "kinematic_tolerance", float),
    "PPLAB_SKILL_TOLERANCE": ("solver", "skill_tolerance", float),
    "PPLAB_MAX_ITERATIONS": ("solver", "max_iterations", int),
    "PPLAB_FC_PROBABILITY_THRESHOLD": ("skill", "fc_probability_threshold", float),
    "PPLAB_MULTIPLIER": ("performance", "multiplier", float),
}


# ============================================================================
# Reading
# ============================================================================


def _read_yaml(path: Path) -> Any:
    with open(path) as f:
        return yaml.safe_load(f)


def _read_toml(path: Path) -> Any:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _read_json(path: Path) -> Any:
    with open(path) as f:
        return json.load(f)


_READERS: dict[str, Callable[[Path], Any]] = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".toml": _read_toml,
    ".json": _read_json,
}


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read the raw section mapping stored in a config file.

    Raises:
        FileNotFoundError: path does not exist
        ValueError: unknown extension, or the file does not hold a mapping
    """
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise ValueError(f"Unknown config format: {path.suffix}")

    data = reader(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def env_overrides(environ: Mapping[str, str]) -> dict[str, dict[str, Any]]:
    """Collect PPLAB_* overrides from an environment mapping such as os.environ."""
    overrides: dict[str, dict[str, Any]] = {}

    for env_var, (section, key, convert) in ENV_OVERRIDES.items():
        value = environ.get(env_var)
        if value is None:
            continue
        try:
            overrides.setdefault(section, {})[key] = convert(value)
        except ValueError:
            raise ValueError(f"Invalid value for {env_var}: {value!r}") from None

    return overrides


def apply_overrides(config: PPLabConfig, data: Mapping[str, Any]) -> PPLabConfig:
    """
    Set section values from a {section: {key: value}} mapping in place.

    Empty sections are skipped and unknown keys are logged and ignored.

    Raises:
        ValueError: a section is neither empty nor a mapping
    """
    for section_name in _SECTIONS:
        values = data.get(section_name) or {}
        if not isinstance(values, Mapping):
            raise ValueError(
                f"Config section '{section_name}' must be a mapping, got {type(values).__name__}"
            )

        section = getattr(config, section_name)
        for key, value in values.items():
            if hasattr(section, key):
                setattr(section, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section_name}.{key}")

    return config


def dict_to_config(data: Mapping[str, Any]) -> PPLabConfig:
    """Build a PPLabConfig from defaults plus a section mapping."""
    return apply_overrides(PPLabConfig(), data)


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> PPLabConfig:
    """
    Build a configuration from explicit sources only.

    Nothing is discovered implicitly: without arguments this returns the
    defaults, so ratings never depend on the working directory or the
    process environment unless the caller asks for it.

    Args:
        path: Config file to read (YAML, TOML or JSON)
        environ: Environment mapping whose PPLAB_* variables override the file

    Returns:
        PPLabConfig with file values applied, then environment values
    """
    config = PPLabConfig()

    if path is not None:
        apply_overrides(config, read_config_file(path))
        logger.info(f"Loaded config from: {path}")

    if environ is not None:
        apply_overrides(config, env_overrides(environ))

    return config


# ============================================================================
# Writing
# ============================================================================


def config_to_dict(config: PPLabConfig) -> dict[str, Any]:
    """Convert PPLabConfig to a dictionary."""
    return asdict(config)


def save_config(config: PPLabConfig, path: Path) -> None:
    """Write a configuration as YAML or JSON, chosen by extension."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".yaml", ".yml", ".json"):
        raise ValueError(f"Unknown config format: {suffix}")

    data = config_to_dict(config)
    with open(path, "w") as f:
        if suffix == ".json":
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved config to: {path}")
