from dataclasses import dataclass, fields
import logging
from pathlib import Path
import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a loop configuration file is missing values or malformed."""
    pass


@dataclass
class LoopConfig:
    # Load hint: under_cpu_limit() is true below this share of the budget
    cpu_limit_ratio: float = 0.9
    cpu_budget_ms: float = 20.0

    # Housekeeping cadence for orphaned construction sites
    errant_construction_interval: int = 1000

    # Spawn room search back-off, in ticks
    spawn_check_found: int = 10000 # around 10 hours of game time
    spawn_check_empty: int = 1000
    spawn_check_retry: int = 100

    # Slack added to the linear distance limit when ranking spawn rooms
    distance_margin: int = 1
    default_distance_limit: int = 4
    default_level_requirement: int = 1
    min_controller_level: int = 1

    waypoint_limit: int = 100
    cache_invalidation_chance: float = 0.01

    def validate(self):
        if not (self.spawn_check_found > self.spawn_check_empty > self.spawn_check_retry > 0):
            raise ConfigError(
                "Spawn check intervals must satisfy found > empty > retry > 0, got "
                f"{self.spawn_check_found}/{self.spawn_check_empty}/{self.spawn_check_retry}."
            )
        if not 0.0 <= self.cache_invalidation_chance <= 1.0:
            raise ConfigError(f"cache_invalidation_chance must be in [0, 1], got {self.cache_invalidation_chance}.")
        if self.cpu_budget_ms <= 0:
            raise ConfigError("cpu_budget_ms must be positive.")
        if self.min_controller_level < 1:
            raise ConfigError("min_controller_level must be at least 1.")
        if self.errant_construction_interval < 1:
            raise ConfigError(
                f"errant_construction_interval must be at least 1, got {self.errant_construction_interval}."
            )
        if self.waypoint_limit < 0:
            raise ConfigError(f"waypoint_limit must not be negative, got {self.waypoint_limit}.")

    @classmethod
    def from_dict(cls, data: dict) -> "LoopConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}.")
        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def load_from_yaml(cls, path: Path) -> "LoopConfig":
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ConfigError(f"YAML file '{path}' is empty or malformed.")
        if not isinstance(data, dict):
            raise ConfigError(f"YAML file '{path}' must contain a mapping.")

        config = cls.from_dict(data)
        logger.debug("Loaded loop config from %s: %s", path, config)
        return config
