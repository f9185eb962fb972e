"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import HolidaySet


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("data.yaml")
    holidays: List[date] = Field(default_factory=list)
    log_level: str = "WARNING"

    @field_validator("holidays")
    @classmethod
    def validate_holidays(cls, value: List[date]) -> List[date]:
        """Deduplicate holidays while preserving order."""
        seen: set[date] = set()
        deduped: List[date] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def holiday_set(self) -> HolidaySet:
        """Get the configured holidays as an injectable HolidaySet."""
        return HolidaySet(dates=frozenset(self.holidays))

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative data_file is resolved against the config file's directory.

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

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of bookingslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
