"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import SlotConfig, parse_time_label


class PollDefaults(BaseModel):
    """Default grid settings offered when creating a rehearsal poll."""
    time_start: str = "09:00"
    time_end: str = "22:00"
    interval_minutes: int = 30

    @field_validator("time_start", "time_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate the value is an HH:MM time of day."""
        parse_time_label(value)
        return value

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, value: int) -> int:
        """Ensure the slot interval is positive."""
        if value <= 0:
            raise ValueError("interval_minutes must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_range_order(self) -> "PollDefaults":
        """Ensure the default window opens before it closes."""
        if parse_time_label(self.time_end) <= parse_time_label(self.time_start):
            raise ValueError("time_end must be later than time_start")
        return self

    def slot_config(self, days) -> SlotConfig:
        """Build a SlotConfig for ``days`` using these defaults."""
        return SlotConfig.create(
            days=days,
            time_start=self.time_start,
            time_end=self.time_end,
            interval_minutes=self.interval_minutes,
        )


class StoreConfig(BaseModel):
    """Connection settings for the hosted persistence service."""
    url: str = ""
    api_key: str = ""
    access_token: str = ""  # Current actor's session token
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/New_York"
    log_level: str = "WARNING"
    poll_defaults: PollDefaults = Field(default_factory=PollDefaults)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def get_log_level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Optional[Path]) -> "AppConfig":
        """Load ``config_path`` if it exists, otherwise return defaults."""
        if config_path is not None and config_path.exists():
            return cls.load_from_yaml(config_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
