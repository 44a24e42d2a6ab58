"""Tests for loading the repository target file."""

from pathlib import Path

import pytest

from branch_reaper.config import (
    InvalidConfigurationError,
    MissingConfigurationError,
    load_targets,
    parse_targets,
)

VALID_CONFIG = """
web:
  url: git@example.com:org/web.git
  namespace: previews
  query_labels:
    app: web
  delete_labels: app=web,tier=preview
  branch_label: branch
  resource_types: [deployments, ingresses]
  branch_annotation: example.com/branch
api:
  url: https://example.com/org/api.git
  namespace: api-previews
  query_labels: app=api
  delete_labels: app=api
  branch_label: git-branch
  resource_types: [deployments]
  branch_annotation: example.com/branch
  branch_prefix: api-
  delete_kinds: [deployment, service]
"""


def entry(**overrides: object) -> dict[str, object]:
    """Create a valid raw entry with optional overrides."""
    data: dict[str, object] = {
        "url": "git@example.com:org/web.git",
        "namespace": "previews",
        "query_labels": {"app": "web"},
        "delete_labels": {"app": "web"},
        "branch_label": "branch",
        "resource_types": ["deployments"],
        "branch_annotation": "example.com/branch",
    }
    data.update(overrides)
    return data


class TestLoadTargets:
    """Tests for load_targets."""

    def test_load_valid_file(self, tmp_path: Path) -> None:
        """Test loading a valid configuration file."""
        config_file = tmp_path / "repos.yaml"
        config_file.write_text(VALID_CONFIG)

        targets = load_targets(config_file)

        assert [t.name for t in targets] == ["web", "api"]
        web, api = targets
        assert web.url == "git@example.com:org/web.git"
        assert web.query_labels == {"app": "web"}
        assert web.delete_labels == {"app": "web", "tier": "preview"}
        assert web.resource_types == ["deployments", "ingresses"]
        assert web.delete_kinds == ["ingress", "service", "deployment"]
        assert web.branch_prefix == ""
        assert api.query_selector == "app=api"
        assert api.branch_prefix == "api-"
        assert api.delete_kinds == ["deployment", "service"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises MissingConfigurationError."""
        with pytest.raises(MissingConfigurationError, match="not found"):
            load_targets(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test unparseable YAML raises InvalidConfigurationError."""
        config_file = tmp_path / "repos.yaml"
        config_file.write_text("web: [unclosed\n")

        with pytest.raises(InvalidConfigurationError, match="Failed to parse"):
            load_targets(config_file)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file is rejected."""
        config_file = tmp_path / "repos.yaml"
        config_file.write_text("")

        with pytest.raises(InvalidConfigurationError, match="expected a mapping"):
            load_targets(config_file)


class TestParseTargets:
    """Tests for parse_targets."""

    def test_not_a_mapping(self) -> None:
        """Test a list document is rejected."""
        with pytest.raises(InvalidConfigurationError, match="expected a mapping"):
            parse_targets([entry()])

    def test_no_repositories(self) -> None:
        """Test an empty mapping is rejected."""
        with pytest.raises(InvalidConfigurationError, match="no repositories"):
            parse_targets({})

    def test_entry_not_a_mapping(self) -> None:
        """Test an entry that is not a mapping is rejected."""
        with pytest.raises(InvalidConfigurationError, match="'web' must be a mapping"):
            parse_targets({"web": "git@example.com:org/web.git"})

    def test_missing_field_names_repo_and_field(self) -> None:
        """Test a missing field is reported with the repository and field name."""
        raw = entry()
        del raw["url"]

        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_targets({"web": raw})

        message = str(exc_info.value)
        assert "'web'" in message
        assert "url: missing required field" in message

    def test_every_bad_field_reported(self) -> None:
        """Test all offending fields appear in one message."""
        raw = entry(resource_types=[])
        del raw["namespace"]

        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_targets({"web": raw})

        message = str(exc_info.value)
        assert "namespace" in message
        assert "resource_types" in message

    def test_unknown_key_rejected(self) -> None:
        """Test unknown keys are not silently ignored."""
        with pytest.raises(InvalidConfigurationError, match="namespcae"):
            parse_targets({"web": entry(namespcae="typo")})

    def test_name_key_rejected(self) -> None:
        """Test an entry may not override its name."""
        with pytest.raises(InvalidConfigurationError, match="must not set 'name'"):
            parse_targets({"web": entry(name="other")})

    @pytest.mark.parametrize("key", ["org/web", "..", "."])
    def test_key_must_be_directory_name(self, key: str) -> None:
        """Test repository keys usable as mirror directory names."""
        with pytest.raises(InvalidConfigurationError, match="single path component"):
            parse_targets({key: entry()})

    def test_blank_namespace_rejected(self) -> None:
        """Test blank required strings are rejected."""
        with pytest.raises(InvalidConfigurationError, match="must not be empty"):
            parse_targets({"web": entry(namespace="  ")})

    def test_malformed_label_string(self) -> None:
        """Test a label string without '=' is rejected."""
        with pytest.raises(InvalidConfigurationError, match="expected key=value"):
            parse_targets({"web": entry(delete_labels="app")})

    def test_numeric_key_becomes_name(self) -> None:
        """Test non-string YAML keys are used as text."""
        targets = parse_targets({42: entry()})

        assert targets[0].name == "42"

    @pytest.mark.parametrize("field", ["query_labels", "delete_labels"])
    def test_label_sets_required(self, field: str) -> None:
        """Test a target without a label set is rejected and the field is named."""
        raw = entry()
        del raw[field]

        with pytest.raises(InvalidConfigurationError) as exc_info:
            parse_targets({"web": raw})

        message = str(exc_info.value)
        assert "'web'" in message
        assert f"{field}: missing required field" in message

    @pytest.mark.parametrize("value", [{}, "", None])
    def test_empty_delete_labels_rejected(self, value: object) -> None:
        """Test an empty delete label set cannot widen the delete selector to a whole namespace."""
        with pytest.raises(InvalidConfigurationError, match="delete_labels"):
            parse_targets({"web": entry(delete_labels=value)})

    def test_empty_query_labels_rejected(self) -> None:
        """Test an empty query label set is rejected."""
        with pytest.raises(InvalidConfigurationError, match="query_labels"):
            parse_targets({"web": entry(query_labels={})})

    @pytest.mark.parametrize("selector", ["env in (a,b)", "!canary", "app!=web", "app==web"])
    def test_non_equality_selector_rejected(self, selector: str) -> None:
        """Test selectors other than key=value are rejected at load time."""
        with pytest.raises(InvalidConfigurationError, match="query_labels"):
            parse_targets({"web": entry(query_labels=selector)})
