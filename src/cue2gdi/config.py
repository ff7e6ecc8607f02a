"""Configuration management for cue2gdi."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class ConversionConfig(BaseModel):
    """GDI layout and output configuration."""

    gdi_filename: str = Field(default="disc.gdi", description="Name of the GDI table file")
    high_density_area_lba: int = Field(
        default=45000, ge=0, description="LBA at which the high-density area starts"
    )
    overwrite: bool = Field(default=False, description="Replace existing output files")

    @field_validator("gdi_filename")
    @classmethod
    def validate_gdi_filename(cls, v: str) -> str:
        """Validate the table name is a bare .gdi filename."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("GDI filename must be a bare filename")
        if not v.lower().endswith(".gdi"):
            raise ValueError("GDI filename must end with .gdi")
        return v


class ProcessingConfig(BaseModel):
    """Batch processing configuration."""

    worker_count: int = Field(default=1, ge=1, description="Number of discs converted in parallel")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class ExecutionConfig(BaseModel):
    """Execution configuration."""

    dry_run: bool = Field(default=False, description="Compute layouts without writing files")


class Config(BaseModel):
    """Main configuration model."""

    conversion: ConversionConfig = Field(
        default_factory=ConversionConfig, description="Conversion configuration"
    )
    processing: ProcessingConfig = Field(
        default_factory=ProcessingConfig, description="Processing configuration"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig, description="Execution configuration"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively replace ``${VAR_NAME}`` with ``os.environ['VAR_NAME']``."""
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config()

    return Config.from_yaml(path)
