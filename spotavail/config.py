"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.intervals import MINUTES_PER_DAY
from .domain.validator import BookingPolicy


class BookingConfig(BaseModel):
    """Duration limits for booking requests."""
    min_duration_minutes: Optional[int] = 15
    max_duration_minutes: Optional[int] = 1440

    @field_validator("min_duration_minutes", "max_duration_minutes")
    @classmethod
    def validate_positive(cls, value: Optional[int]) -> Optional[int]:
        """Ensure limits are positive when set."""
        if value is not None and value <= 0:
            raise ValueError("Duration limits must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_limits_order(self) -> "BookingConfig":
        """Ensure the minimum does not exceed the maximum."""
        if (
            self.min_duration_minutes is not None
            and self.max_duration_minutes is not None
            and self.min_duration_minutes > self.max_duration_minutes
        ):
            raise ValueError("min_duration_minutes must not exceed max_duration_minutes")
        return self

    def to_policy(self) -> BookingPolicy:
        """Get the limits as a domain BookingPolicy."""
        return BookingPolicy(
            min_duration_minutes=self.min_duration_minutes,
            max_duration_minutes=self.max_duration_minutes,
        )


class StoreConfig(BaseModel):
    """Where schedules are read from."""
    kind: Literal["file", "rest"] = "file"
    path: Optional[Path] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = 30.0

    @model_validator(mode="after")
    def validate_kind_settings(self) -> "StoreConfig":
        """Ensure each store kind has what it needs."""
        if self.kind == "file" and self.path is None:
            raise ValueError("store.path is required for the file store")
        if self.kind == "rest" and not self.base_url:
            raise ValueError("store.base_url is required for the rest store")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    slot_minutes: int = 30
    booking: BookingConfig = Field(default_factory=BookingConfig)
    store: StoreConfig = Field(default_factory=lambda: StoreConfig(path=Path("schedules.yaml")))

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the time zone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, value: int) -> int:
        """Ensure slots tile a day exactly."""
        if value <= 0 or MINUTES_PER_DAY % value:
            raise ValueError(f"slot_minutes must divide 1440, got {value}")
        return value

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

        config = cls(**data)

        # Relative store paths are relative to the config file
        if config.store.path is not None and not config.store.path.is_absolute():
            config.store.path = config_path.parent / config.store.path

        return config


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
