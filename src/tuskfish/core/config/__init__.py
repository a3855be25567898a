"""
Configuration Management Package

Provides Pydantic-based configuration models and management for Tuskfish.
"""

from tuskfish.core.config.models import AppConfig, DatabaseConfig, LoggingConfig, SiteConfig
from tuskfish.core.config.manager import ConfigManager

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "SiteConfig",
    "ConfigManager",
]
