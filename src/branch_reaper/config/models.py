"""Configuration models."""

import os
import re
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from branch_reaper.config.exceptions import InvalidConfigurationError

APP_NAME = "branch-reaper"
CONFIG_FILE_NAME = "repos.yaml"
DEFAULT_DELETE_KINDS = ("ingress", "service", "deployment")

_LABEL_NAME = r"[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?"
_LABEL_KEY = re.compile(rf"([a-z0-9]([-a-z0-9.]{{0,251}}[a-z0-9])?/)?{_LABEL_NAME}")
_LABEL_VALUE = re.compile(rf"({_LABEL_NAME})?")


def default_config_file() -> Path:
    """Get the default repository configuration file path.

    Returns:
        Path inside the user configuration directory
    """
    return Path(typer.get_app_dir(APP_NAME)) / CONFIG_FILE_NAME


def default_cache_dir() -> Path:
    """Get the default directory holding repository mirrors.

    Returns:
        Path inside the user cache directory ($XDG_CACHE_HOME or ~/.cache)
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    base = Path(cache_home) if cache_home else Path.home() / ".cache"
    return base / APP_NAME


def parse_label_set(value: str | dict[str, Any] | None) -> dict[str, str]:
    """Parse a label set from a mapping or a ``key=value,key=value`` string.

    Only equality requirements are supported. Set-based (``env in (a,b)``)
    and existence (``!canary``) selectors are rejected, as are ``!=`` and
    ``==`` forms.

    Args:
        value: Label set as written in the configuration file

    Returns:
        Mapping of label keys to values

    Raises:
        ValueError: If an entry is not an equality requirement with a valid
            label key and value
    """
    if value is None:
        return {}

    pairs: list[tuple[str, str]]
    if isinstance(value, dict):
        pairs = [(str(k), str(v)) for k, v in value.items()]
    else:
        pairs = []
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            key, sep, label_value = part.partition("=")
            if not sep or not key.strip():
                raise ValueError(f"expected key=value (only equality selectors are supported), got {part!r}")
            pairs.append((key.strip(), label_value.strip()))

    labels: dict[str, str] = {}
    for key, label_value in pairs:
        if not _LABEL_KEY.fullmatch(key):
            raise ValueError(f"invalid label key {key!r} (only equality selectors are supported)")
        if not _LABEL_VALUE.fullmatch(label_value):
            raise ValueError(f"invalid value {label_value!r} for label {key!r}")
        labels[key] = label_value
    return labels


def format_label_selector(labels: dict[str, str]) -> str:
    """Render a label set as a selector string in stable key order.

    Args:
        labels: Mapping of label keys to values

    Returns:
        Selector such as ``app=web,tier=preview``
    """
    return ",".join(f"{key}={labels[key]}" for key in sorted(labels))


class RepoTarget(BaseModel):
    """One repository/namespace pair to reconcile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(description="Repository key, also the mirror directory name")
    url: str = Field(description="Repository locator passed to git")
    namespace: str = Field(description="Kubernetes namespace holding the branch deployments")
    query_labels: dict[str, str] = Field(
        min_length=1,
        description="Labels selecting the resources whose annotations are read",
    )
    delete_labels: dict[str, str] = Field(
        min_length=1,
        description="Static labels of the deletion selector",
    )
    branch_label: str = Field(description="Label key carrying the branch slug")
    resource_types: list[str] = Field(
        min_length=1,
        description="Resource types queried for the branch annotation",
    )
    branch_annotation: str = Field(description="Annotation key holding the branch name")
    branch_prefix: str = Field(default="", description="Prefix prepended to branch names before slugging")
    delete_kinds: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DELETE_KINDS),
        min_length=1,
        description="Resource kinds removed for a deleted branch",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure the repository key is usable as a directory name.

        Args:
            v: Repository key

        Returns:
            The unchanged key

        Raises:
            ValueError: If the key is empty or contains path separators
        """
        if not v or v in {".", ".."} or "/" in v or "\\" in v:
            raise ValueError(f"repository key must be a single path component, got {v!r}")
        return v

    @field_validator("url", "namespace", "branch_label", "branch_annotation")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank required strings.

        Args:
            v: Field value

        Returns:
            Value with surrounding whitespace removed
        """
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("query_labels", "delete_labels", mode="before")
    @classmethod
    def parse_labels(cls, v: str | dict[str, Any] | None) -> dict[str, str]:
        """Accept label sets written as mappings or selector strings."""
        return parse_label_set(v)

    @property
    def query_selector(self) -> str:
        """Label selector used to list deployed resources."""
        return format_label_selector(self.query_labels)


class ReaperSettings(BaseSettings):
    """Process-wide settings for branch-reaper."""

    config_file: Path = Field(
        default_factory=default_config_file,
        description="YAML file listing the repositories to reconcile",
    )
    cache_dir: Path = Field(
        default_factory=default_cache_dir,
        description="Directory holding one mirror per configured repository",
    )
    kubectl: str = Field(default="kubectl", description="kubectl binary to invoke")
    request_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for each Kubernetes API call",
    )
    git_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for mirror refresh and branch listing",
    )
    abort_on_degraded: bool = Field(
        default=False,
        description="Skip deletions for a target when any resource type query failed",
    )

    model_config = SettingsConfigDict(
        env_file=[".env", ".env.branchreaper"],
        env_file_encoding="utf-8",
        env_prefix="BRANCH_REAPER_",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings.

        Args:
            **kwargs: Setting values; ``env_file`` selects a custom env file

        Raises:
            InvalidConfigurationError: If env_file is specified but does not exist
        """
        env_file = kwargs.pop("env_file", None)

        if env_file is not None:
            env_path = Path(env_file)
            if not env_path.exists():
                raise InvalidConfigurationError(f"Environment file not found: {env_file}")
            # Read back in settings_customise_sources
            kwargs["_custom_env_file"] = env_path

        super().__init__(**kwargs)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use a custom env file in place of the default ones when given.

        Args:
            settings_cls: The settings class being instantiated
            init_settings: Settings from __init__ arguments
            env_settings: Settings from environment variables
            dotenv_settings: Settings from .env files
            file_secret_settings: Settings from secret files

        Returns:
            Tuple of settings sources in priority order
        """
        init_kwargs = init_settings.init_kwargs  # type: ignore[attr-defined]
        custom_env_path = init_kwargs.get("_custom_env_file")

        if custom_env_path is not None:
            custom_dotenv = DotEnvSettingsSource(
                settings_cls,
                env_file=custom_env_path,
                env_file_encoding="utf-8",
            )
            return (init_settings, custom_dotenv, env_settings, file_secret_settings)

        return (init_settings, env_settings, dotenv_settings, file_secret_settings)
