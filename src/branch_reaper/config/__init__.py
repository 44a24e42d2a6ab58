"""Configuration management for branch-reaper."""

from branch_reaper.config.exceptions import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from branch_reaper.config.loader import load_targets, parse_targets
from branch_reaper.config.models import ReaperSettings, RepoTarget

__all__ = [
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "ReaperSettings",
    "RepoTarget",
    "load_targets",
    "parse_targets",
]
