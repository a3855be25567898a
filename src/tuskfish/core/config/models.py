"""
Configuration Models

Pydantic models for type-safe configuration management with validation,
defaults, and field documentation.
"""

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DatabaseConfig(BaseModel):
    """Configuration for the SQLite content database."""

    path: Path = Field(
        default=Path("tuskfish.db"),
        description="Path to the SQLite database file (':memory:' for a throwaway database)"
    )
    timeout: float = Field(
        default=30.0,
        ge=0.0,
        le=600.0,
        description="Seconds to wait for a database lock before failing"
    )
    journal_mode: str = Field(
        default="WAL",
        description="SQLite journal mode"
    )
    synchronous: str = Field(
        default="NORMAL",
        description="SQLite synchronous mode"
    )
    foreign_keys: bool = Field(
        default=True,
        description="Enable foreign key constraints"
    )

    @field_validator('journal_mode')
    @classmethod
    def validate_journal_mode(cls, v):
        """Validate journal mode is one SQLite understands."""
        valid_modes = {'DELETE', 'TRUNCATE', 'PERSIST', 'MEMORY', 'WAL', 'OFF'}
        if v.upper() not in valid_modes:
            raise ValueError(f"Journal mode must be one of: {', '.join(sorted(valid_modes))}")
        return v.upper()

    @field_validator('synchronous')
    @classmethod
    def validate_synchronous(cls, v):
        """Validate synchronous mode."""
        valid_modes = {'OFF', 'NORMAL', 'FULL', 'EXTRA'}
        if v.upper() not in valid_modes:
            raise ValueError(f"Synchronous mode must be one of: {', '.join(sorted(valid_modes))}")
        return v.upper()


class SiteConfig(BaseModel):
    """Site preferences that affect content queries."""

    site_name: str = Field(
        default="Tuskfish",
        description="Name of the site"
    )
    user_pagination: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Number of content objects per page on public listings"
    )
    admin_pagination: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Number of content objects per page in the admin listing"
    )
    search_pagination: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Number of search results per page"
    )
    min_search_length: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Minimum length of a search term"
    )
    default_language: str = Field(
        default="en",
        description="Default content language code"
    )
    languages: Dict[str, str] = Field(
        default_factory=lambda: {"en": "English", "th": "Thai"},
        description="Available content languages"
    )

    @field_validator('default_language')
    @classmethod
    def validate_language(cls, v):
        """Validate language code is a short alphabetic code."""
        if not v.isalpha() or len(v) > 8:
            raise ValueError(f"Invalid language code: {v}")
        return v.lower()


class LoggingConfig(BaseModel):
    """Logging settings applied by the CLI."""

    level: str = Field(
        default="INFO",
        description="Root log level"
    )
    format: str = Field(
        default="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        description="Log record format"
    )
    datefmt: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Timestamp format"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level name."""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v.upper()


class AppConfig(BaseModel):
    """Top-level Tuskfish configuration."""

    model_config = ConfigDict(validate_assignment=True)

    version: str = Field(
        default="1.0",
        description="Configuration schema version"
    )
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    verbose: bool = Field(
        default=False,
        description="Enable verbose output"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    def get_log_level(self) -> str:
        """Effective log level, taking the debug flag into account."""
        return "DEBUG" if self.debug else self.logging.level
