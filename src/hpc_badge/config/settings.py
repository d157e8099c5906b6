"""
Configuration management for hpc-badge.

Uses Pydantic for type-safe, validated configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from hpc_badge.errors import ConfigurationError

DRAFT_OVERLAY = "draft.overlay"
TEMPLATE_OVERLAY = "template.overlay"
OVERLAY_TIX = "overlay.tix"
BADGE_SVG = "badge.svg"


class CoverageSettings(BaseSettings):
    """Main configuration for hpc-badge.

    Settings can be overridden via:
    1. Environment variables (prefixed with HPC_; the directory settings
       also accept the bare WORKDIR, DESTDIR and SRC_DIR names)
    2. .env file in the working directory
    3. Programmatic overrides

    Example:
        export WORKDIR=.coverage
        export HPC_DESTDIR=dist/coverage
        export HPC_LOG_LEVEL=DEBUG
    """

    # === Paths ===
    workdir: Path = Field(
        default=Path(".coverage"),
        validation_alias=AliasChoices("HPC_WORKDIR", "WORKDIR"),
        description="Directory for intermediate artifacts (overlays, merged trace)",
    )
    destdir: Path = Field(
        default=Path("dist/coverage"),
        validation_alias=AliasChoices("HPC_DESTDIR", "DESTDIR"),
        description="Directory for the HTML report and the badge",
    )
    srcdir: Path = Field(
        default=Path("."),
        validation_alias=AliasChoices("HPC_SRCDIR", "SRC_DIR"),
        description="Package source root (holds the .cabal file)",
    )

    # === External tools ===
    stack_executable: str = Field(
        default="stack", description="stack executable used for every tool call"
    )
    report_index: str = Field(
        default="hpc_index.html",
        description="File name of the report summary page written by hpc",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")
    logs_dir: Optional[Path] = Field(
        default=None, description="Log files directory (default: WORKDIR/logs)"
    )
    log_rotation: str = Field(default="10 MB", description="Log file rotation size")
    log_retention: str = Field(
        default="10 days", description="Log file retention period"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("report_index")
    @classmethod
    def validate_report_index(cls, v: str) -> str:
        """The report index is a file name inside destdir, not a path."""
        if not v or Path(v).name != v:
            raise ValueError(f"report_index must be a bare file name, got {v!r}")
        return v

    @field_validator("stack_executable")
    @classmethod
    def validate_stack_executable(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("stack_executable must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def default_logs_dir(self) -> "CoverageSettings":
        if self.logs_dir is None:
            self.logs_dir = self.workdir / "logs"
        return self

    # === Derived paths ===
    @property
    def draft_overlay(self) -> Path:
        return self.workdir / DRAFT_OVERLAY

    @property
    def template_overlay(self) -> Path:
        return self.workdir / TEMPLATE_OVERLAY

    @property
    def overlay_tix(self) -> Path:
        return self.workdir / OVERLAY_TIX

    @property
    def report_html(self) -> Path:
        return self.destdir / self.report_index

    @property
    def badge_svg(self) -> Path:
        return self.destdir / BADGE_SVG

    def paths_summary(self) -> dict:
        """Return a dictionary of all configured paths."""
        return {
            "WORKDIR": str(self.workdir),
            "DESTDIR": str(self.destdir),
            "SRC_DIR": str(self.srcdir),
            "DRAFT_OVERLAY": str(self.draft_overlay),
            "TEMPLATE_OVERLAY": str(self.template_overlay),
            "OVERLAY_TIX": str(self.overlay_tix),
            "REPORT_HTML": str(self.report_html),
            "BADGE_SVG": str(self.badge_svg),
            "STACK": self.stack_executable,
        }

    model_config = {
        "env_prefix": "HPC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }


def load_settings(**overrides) -> CoverageSettings:
    """Build settings from the environment, .env file and ``overrides``.

    Raises:
        ConfigurationError: a value does not validate.
    """
    try:
        return CoverageSettings(**overrides)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid configuration:\n{error}") from error


# Global settings instance, built on first access so that importing the
# package never fails on a bad environment.
_settings: Optional[CoverageSettings] = None


def get_settings() -> CoverageSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> CoverageSettings:
    """Reload settings from environment and .env file.

    Useful for testing or runtime configuration changes.
    """
    global _settings
    _settings = load_settings()
    return _settings


def __getattr__(name: str):
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
