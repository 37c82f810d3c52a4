"""Pydantic configuration schemas for the snooker trainer.

This module defines the typed configuration consumed by the rules engine,
the logging setup and the HTTP surface:
- Table geometry constants (dimensions, ball and pocket radii, baulk line, D)
- Rule constants (foul minimum, number of reds, stationary threshold)
- Logging and API server settings
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ConfigSource(str, Enum):
    """Configuration source enumeration, lowest precedence first."""

    DEFAULT = "default"
    FILE = "file"
    ENVIRONMENT = "environment"
    RUNTIME = "runtime"


class LogLevel(str, Enum):
    """Logging level enumeration."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


# =============================================================================
# Table Configuration
# =============================================================================


class TableConfig(BaseConfig):
    """Playing-area geometry supplied to the rules engine.

    Fractions are relative to the playing area inside the cushions. The long
    axis runs along x, with the baulk end on the left.
    """

    width: float = Field(default=1000.0, gt=0, description="Playing area length")
    height: float = Field(default=500.0, gt=0, description="Playing area width")
    origin_x: float = Field(
        default=0.0, description="X coordinate of the baulk-end/top-side corner"
    )
    origin_y: float = Field(
        default=0.0, description="Y coordinate of the baulk-end/top-side corner"
    )
    ball_radius: float = Field(default=10.0, gt=0, description="Ball radius")
    pocket_radius: float = Field(default=16.0, gt=0, description="Pocket radius")
    baulk_fraction: float = Field(
        default=0.2,
        gt=0,
        lt=0.5,
        description="Distance of the baulk line from the baulk cushion",
    )
    d_radius_fraction: float = Field(
        default=1.0 / 6.0,
        gt=0,
        lt=0.5,
        description="Radius of the D as a fraction of the table width",
    )
    pink_fraction: float = Field(
        default=0.25,
        gt=0,
        lt=0.5,
        description="Distance of the pink spot from the top cushion",
    )
    black_fraction: float = Field(
        default=1.0 / 11.0,
        gt=0,
        lt=0.5,
        description="Distance of the black spot from the top cushion",
    )

    @model_validator(mode="after")
    def validate_spot_order(self) -> "TableConfig":
        """The black spot must lie between the pink spot and the top cushion."""
        if self.black_fraction >= self.pink_fraction:
            raise ValueError("black_fraction must be smaller than pink_fraction")
        if self.ball_radius * 2 >= self.height * self.d_radius_fraction:
            raise ValueError("ball_radius is too large for the configured D")
        return self


# =============================================================================
# Rules Configuration
# =============================================================================


class RulesConfig(BaseConfig):
    """Constants of the snooker rules."""

    foul_minimum: int = Field(
        default=4, ge=1, le=7, description="Minimum points awarded for a foul"
    )
    max_reds: int = Field(
        default=15, ge=1, le=15, description="Number of reds racked for a frame"
    )
    players: int = Field(default=2, description="Number of players in a frame")
    stationary_threshold: float = Field(
        default=0.15,
        gt=0,
        description="Velocity component below which a ball counts as stationary",
    )
    event_history_size: int = Field(
        default=1000, ge=10, description="Number of engine events kept in history"
    )

    @field_validator("players")
    @classmethod
    def validate_players(cls, v: int) -> int:
        """Snooker frames are played between exactly two players."""
        if v != 2:
            raise ValueError("A snooker frame requires exactly 2 players")
        return v


# =============================================================================
# Logging / API Configuration
# =============================================================================


class LoggingConfig(BaseConfig):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Global logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    datefmt: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="Date format for log messages"
    )
    file: Optional[str] = Field(
        default=None, description="Optional log file path (console only if unset)"
    )
    config_path: Optional[str] = Field(
        default=None, description="Optional logging dictConfig YAML file"
    )


class ApiConfig(BaseConfig):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )


class SnookerConfig(BaseConfig):
    """Root configuration for the snooker trainer."""

    table: TableConfig = Field(default_factory=TableConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)


def create_default_config() -> SnookerConfig:
    """Create a default application configuration."""
    return SnookerConfig()
