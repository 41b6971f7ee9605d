"""
NYC Shootings - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variables for values the YAML files leave unset
- Type validation via Pydantic

Usage:
    from src.shared.config import get_config

    config = get_config()  # Uses NS_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    policy = config.cleaning.missing_policy
    fraction = config.model.train_fraction
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "nyc-shootings"
    version: str = "0.1.0"
    description: str = "Exploratory analysis of NYPD shooting incidents"


class StoragePathsConfig(BaseModel):
    """Local data paths."""

    raw: str = "data/raw/NYPD_Shooting_Incident_Data__Historic_.csv"
    reports: str = "data/reports"


class StorageConfig(BaseModel):
    """Storage configuration."""

    paths: StoragePathsConfig = Field(default_factory=StoragePathsConfig)


class FieldPolicy(BaseModel):
    """Missing-value rule for a single cleaned field."""

    action: Literal["fill", "drop", "keep"]
    value: Any = None

    @model_validator(mode="after")
    def check_fill_value(self) -> FieldPolicy:
        """A fill rule needs something to fill with."""
        if self.action == "fill" and self.value is None:
            raise ValueError("fill policy requires a value")
        return self


def _default_missing_policy() -> dict[str, FieldPolicy]:
    return {
        "incident_key": FieldPolicy(action="drop"),
        "occur_date": FieldPolicy(action="drop"),
        "occur_time": FieldPolicy(action="keep"),
        "borough": FieldPolicy(action="fill", value="Unknown"),
        "precinct": FieldPolicy(action="keep"),
        "victim_age_group": FieldPolicy(action="fill", value="UNKNOWN"),
        "victim_sex": FieldPolicy(action="fill", value="UNKNOWN"),
        "victim_race": FieldPolicy(action="fill", value="UNKNOWN"),
        "perp_age_group": FieldPolicy(action="fill", value="UNKNOWN"),
        "perp_sex": FieldPolicy(action="fill", value="UNKNOWN"),
        "perp_race": FieldPolicy(action="fill", value="UNKNOWN"),
        "latitude": FieldPolicy(action="drop"),
        "longitude": FieldPolicy(action="drop"),
        "is_murder": FieldPolicy(action="keep"),
    }


class CleaningConfig(BaseModel):
    """Cleaning rules applied to raw incident records."""

    date_format: str = "%m/%d/%Y"
    null_tokens: list[str] = Field(default_factory=lambda: ["", "(null)", "NULL", "NA", "N/A"])
    missing_policy: dict[str, FieldPolicy] = Field(default_factory=_default_missing_policy)


class GeoBoundsConfig(BaseModel):
    """Geographic bounds for New York City."""

    min_lat: float = 40.49
    max_lat: float = 40.92
    min_lon: float = -74.27
    max_lon: float = -73.68


class ValidationConfig(BaseModel):
    """Validation configuration."""

    strict_schema: bool = True
    geo_bounds: GeoBoundsConfig = Field(default_factory=GeoBoundsConfig)


class TimeOfDayConfig(BaseModel):
    """Hour boundaries for time-of-day buckets (start hour of each bucket)."""

    night: int = 0
    morning: int = 6
    afternoon: int = 12
    evening: int = 18

    @model_validator(mode="after")
    def check_order(self) -> TimeOfDayConfig:
        """Buckets must partition [0, 24] in order."""
        bounds = [self.night, self.morning, self.afternoon, self.evening]
        if bounds[0] != 0 or bounds != sorted(set(bounds)) or bounds[-1] >= 24:
            raise ValueError(f"Invalid time-of-day boundaries: {bounds}")
        return self


class FeaturesConfig(BaseModel):
    """Feature building configuration."""

    time_of_day: TimeOfDayConfig = Field(default_factory=TimeOfDayConfig)
    predictors: list[str] = Field(
        default_factory=lambda: ["borough", "precinct", "time_of_day"]
    )
    target: str = "is_murder"


class ModelConfig(BaseModel):
    """Murder classifier configuration."""

    train_fraction: float = 0.8
    seed: int = 42
    max_iter: int = 1000
    unseen_category: Literal["ignore"] = "ignore"

    @field_validator("train_fraction")
    @classmethod
    def validate_train_fraction(cls, v: float) -> float:
        """Validate the train fraction is a proper share."""
        if not 0.0 < v < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for NYC Shootings.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables

    Values from the YAML files win; NS_ prefixed environment variables fill
    in any field the YAML files leave unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="NS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"dev", "prod"}
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path | None:
    """Get the configuration directory path."""
    # Try relative path from project root
    config_dir = Path(__file__).parent.parent.parent / "configs"
    if config_dir.exists():
        return config_dir

    # Try from current working directory
    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    logger.warning("Could not find configs directory, using built-in defaults")
    return None


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    config_dir = _get_config_dir()
    if config_dir is None:
        return {"environment": environment}
    env_dir = config_dir / "environments"

    # Load base config
    base_config = _load_yaml_file(env_dir / "base.yaml")

    # Load environment-specific config
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    # Merge configs
    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses NS_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.

    Example:
        config = get_config()  # Uses NS_ENVIRONMENT or defaults to dev
        config = get_config("prod")  # Explicit production config

        # Access values
        seed = config.model.seed
        policy = config.cleaning.missing_policy["borough"]
    """
    if environment is None:
        environment = os.getenv("NS_ENVIRONMENT", "dev")

    # Load YAML configuration
    yaml_config = _load_config_for_environment(environment)

    # Create Settings object (also loads env vars)
    return Settings(**yaml_config)


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)


@lru_cache(maxsize=16)
def get_dataset_config(dataset: str) -> dict[str, Any]:
    """
    Get the source-schema configuration for a dataset.

    Reads configs/datasets/<dataset>.yaml. Returns an empty dict when the
    file is absent so callers can fall back to their own defaults.
    """
    config_dir = _get_config_dir()
    if config_dir is None:
        return {}
    return _load_yaml_file(config_dir / "datasets" / f"{dataset}.yaml")


# =============================================================================
# Convenience Functions
# =============================================================================


def get_raw_data_path(config: Settings | None = None) -> Path:
    """Get the default path of the raw shooting incident CSV."""
    if config is None:
        config = get_config()
    return Path(config.storage.paths.raw)
