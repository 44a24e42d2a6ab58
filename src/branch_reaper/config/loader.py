"""Loading of the repository target file."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from branch_reaper.config.exceptions import InvalidConfigurationError, MissingConfigurationError
from branch_reaper.config.models import RepoTarget

logger = logging.getLogger(__name__)


def _describe_validation_error(repo_key: str, error: ValidationError) -> str:
    """Turn a pydantic error into a one-line-per-field message.

    Args:
        repo_key: Repository key the error belongs to
        error: Validation error raised for that repository

    Returns:
        Message naming the repository and every offending field
    """
    lines = [f"Invalid configuration for repository '{repo_key}':"]
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "<entry>"
        if err["type"] == "missing":
            lines.append(f"  - {field}: missing required field")
        else:
            lines.append(f"  - {field}: {err['msg']}")
    return "\n".join(lines)


def parse_targets(data: Any, source: str = "<config>") -> list[RepoTarget]:
    """Validate raw configuration data into repository targets.

    Args:
        data: Parsed YAML document, a mapping keyed by repository name
        source: Description of where the data came from, used in messages

    Returns:
        Targets in file order

    Raises:
        InvalidConfigurationError: If the document shape or any entry is invalid
    """
    if not isinstance(data, dict):
        raise InvalidConfigurationError(f"{source}: expected a mapping of repository names, got {type(data).__name__}")
    if not data:
        raise InvalidConfigurationError(f"{source}: no repositories configured")

    targets: list[RepoTarget] = []
    for repo_key, entry in data.items():
        if not isinstance(entry, dict):
            raise InvalidConfigurationError(f"{source}: entry for repository '{repo_key}' must be a mapping")
        if "name" in entry:
            raise InvalidConfigurationError(
                f"{source}: repository '{repo_key}' must not set 'name'; the mapping key is the name"
            )
        try:
            targets.append(RepoTarget.model_validate({**entry, "name": str(repo_key)}))
        except ValidationError as e:
            raise InvalidConfigurationError(_describe_validation_error(str(repo_key), e)) from e

    return targets


def load_targets(path: str | Path) -> list[RepoTarget]:
    """Load and validate the repository target file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated targets in file order

    Raises:
        MissingConfigurationError: If the file does not exist
        InvalidConfigurationError: If the file cannot be read, parsed or validated
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise MissingConfigurationError(f"Configuration file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise InvalidConfigurationError(f"Failed to parse {config_path}: {e}") from e
    except OSError as e:
        raise InvalidConfigurationError(f"Failed to read {config_path}: {e}") from e

    targets = parse_targets(data, source=str(config_path))
    logger.debug(f"Loaded {len(targets)} repository targets from {config_path}")
    return targets
