"""Configuration loader with Pydantic validation and defaults.

This module loads config/config.yaml, validates all keys, and provides
a typed Settings object with sane defaults if keys are missing.
"""

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _check_unit_interval(name: str, v: float) -> float:
    if not 0.0 <= v <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0")
    return v


class ScoringConfig(BaseSettings):
    """Claim viability scoring policy."""

    risk_dampening: float = 0.3      # Share of mean risk weight subtracted from support
    high_threshold: float = 0.7      # score >= this -> high viability
    low_threshold: float = 0.3       # score <= this -> low viability

    @field_validator("risk_dampening", "high_threshold", "low_threshold")
    @classmethod
    def validate_unit_interval(cls, v: float, info) -> float:
        """Ensure policy constants are in [0.0, 1.0]."""
        return _check_unit_interval(info.field_name, v)

    @model_validator(mode="after")
    def validate_band_order(self) -> "ScoringConfig":
        if self.low_threshold > self.high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")
        return self


class GraphConfig(BaseSettings):
    """Evidence graph defaults."""

    strong_node_threshold: float = 0.7   # Nodes at or above count as strong
    weak_node_threshold: float = 0.3     # Nodes at or below count as weak
    high_risk_threshold: float = 0.6     # Risk nodes above this need mitigation
    top_nodes: int = 5                   # Strongest/weakest nodes listed in analysis

    @field_validator(
        "strong_node_threshold",
        "weak_node_threshold",
        "high_risk_threshold",
    )
    @classmethod
    def validate_unit_interval(cls, v: float, info) -> float:
        """Ensure graph cut-offs are in [0.0, 1.0]."""
        return _check_unit_interval(info.field_name, v)


class DeadlinesConfig(BaseSettings):
    """Deadline register configuration."""

    adjust_weekends: bool = True    # Move due dates on Sat/Sun to Monday
    alert_days: list[int] = Field(default_factory=lambda: [10, 7, 5, 3, 1, 0])
    default_origin: Literal[
        "publication", "summons", "contract", "manual", "ai_detected"
    ] = "manual"

    @field_validator("alert_days")
    @classmethod
    def validate_alert_days(cls, v: list[int]) -> list[int]:
        """Alert offsets are non-negative day counts."""
        if any(day < 0 for day in v):
            raise ValueError("alert_days must be >= 0")
        return sorted(set(v), reverse=True)


class PathsConfig(BaseSettings):
    """Paths configuration."""

    data: str = "data"


class LoggingConfig(BaseSettings):
    """Logging configuration for command-line entry points."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Main settings class with all configuration sections."""

    model_config = SettingsConfigDict(extra="ignore")

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    deadlines: DeadlinesConfig = Field(default_factory=DeadlinesConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "Settings":
        """Load settings from a YAML file.

        Args:
            config_path: Path to config.yaml file

        Returns:
            Settings instance with loaded configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML is invalid
            ValidationError: If configuration doesn't match schema
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**cls._merge_with_defaults(config_dict))

    @classmethod
    def _merge_with_defaults(cls, config_dict: dict) -> dict:
        """Merge config dict with default settings.

        Missing keys get default values from the Pydantic models.
        """
        defaults = cls().model_dump()

        def deep_merge(base: dict, override: dict) -> dict:
            """Recursively merge override into base."""
            result = base.copy()
            for key, value in override.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = deep_merge(result[key], value)
                else:
                    result[key] = value
            return result

        return deep_merge(defaults, config_dict)


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get settings instance, loading from config file or using defaults.

    Args:
        config_path: Optional path to config.yaml. If None, uses $JUSTINIANUS_CONFIG
                     or config/config.yaml relative to the project root, then
                     falls back to defaults.

    Returns:
        Settings instance
    """
    if config_path is None:
        env_path = os.environ.get("JUSTINIANUS_CONFIG")
        if env_path:
            config_path = env_path
        else:
            project_root = Path(__file__).parent.parent
            config_path = project_root / "config" / "config.yaml"

    config_path = Path(config_path)
    if config_path.exists():
        return Settings.from_yaml(config_path)

    return Settings()
