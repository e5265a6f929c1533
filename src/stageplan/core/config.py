# src/stageplan/core/config.py
"""
Configuration schema and loading for stage planning.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from stageplan.contracts.enums import TieBreak


class PlannerSettings(BaseModel):
    """Top-level planner configuration.

    Example YAML:
        tie_break: insertion
        log_level: DEBUG
        json_logs: true
    """

    model_config = {"frozen": True}

    tie_break: TieBreak = Field(
        default=TieBreak.LEXICOGRAPHIC,
        description="Which stage wins when several are equally eligible",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level passed to configure_logging()",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    @field_validator("tie_break", mode="before")
    @classmethod
    def normalize_tie_break(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


def load_settings(config_path: Path | None = None) -> PlannerSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (STAGEPLAN_*) - highest priority
    2. Config file (settings.yaml), when given
    3. Defaults from Pydantic schema - lowest priority

    Args:
        config_path: Path to YAML configuration file, or None for
            environment and defaults only

    Returns:
        Validated PlannerSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    settings_files: list[str] = []
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        settings_files.append(str(config_path))

    dynaconf_settings = Dynaconf(
        envvar_prefix="STAGEPLAN",
        settings_files=settings_files,
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # Don't auto-load .env
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return PlannerSettings(**raw_config)
