"""Tests for live branch discovery."""

from pathlib import Path
from unittest.mock import MagicMock

import git
import pytest

from branch_reaper.config import RepoTarget
from branch_reaper.vcs.base import MirrorStore
from branch_reaper.vcs.exceptions import BranchListError, MirrorError
from branch_reaper.vcs.git.branch_source import GitBranchSource, parse_ls_remote_heads
from branch_reaper.vcs.git.mirror import GitMirrorStore

SHA = "3f786850e387550fdab836ed7e6dc881de23001b"


def make_target(url: str) -> RepoTarget:
    """Create a target pointing at the given repository."""
    return RepoTarget(
        name="web",
        url=url,
        namespace="previews",
        query_labels={"app": "web"},
        delete_labels={"app": "web"},
        branch_label="branch",
        resource_types=["deployments"],
        branch_annotation="example.com/branch",
    )


@pytest.fixture
def origin(tmp_path: Path) -> git.Repo:
    """Create an origin repository with several branches."""
    path = tmp_path / "origin"
    repo = git.Repo.init(path)
    (path / "README.md").write_text("hello\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")
    repo.create_head("feature/ABC-123")
    repo.create_head("dev")
    return repo


class TestParseLsRemoteHeads:
    """Tests for parse_ls_remote_heads."""

    def test_parse(self) -> None:
        """Test head references are stripped to branch names."""
        output = f"{SHA}\trefs/heads/main\n{SHA}\trefs/heads/feature/x\n"

        assert parse_ls_remote_heads(output) == {"main", "feature/x"}

    def test_empty_output(self) -> None:
        """Test a repository without branches."""
        assert parse_ls_remote_heads("") == set()

    def test_blank_lines_ignored(self) -> None:
        """Test blank lines are skipped."""
        assert parse_ls_remote_heads(f"\n{SHA}\trefs/heads/main\n\n") == {"main"}

    @pytest.mark.parametrize(
        "line",
        [
            "garbage",
            f"{SHA}\trefs/tags/v1.0",
            f"{SHA}\trefs/heads/",
            "\trefs/heads/main",
        ],
    )
    def test_malformed_line(self, line: str) -> None:
        """Test lines that are not head references raise BranchListError."""
        with pytest.raises(BranchListError, match="Unexpected ls-remote line"):
            parse_ls_remote_heads(line)


class TestGitBranchSource:
    """Tests for GitBranchSource.live_branches."""

    def test_live_branches(self, origin: git.Repo, tmp_path: Path) -> None:
        """Test branches are listed through a freshly created mirror."""
        store = GitMirrorStore(tmp_path / "cache", timeout=30)
        source = GitBranchSource(store, timeout=30)

        branches = source.live_branches(make_target(origin.working_dir))

        assert branches == {"main", "feature/ABC-123", "dev"}
        assert store.mirror_path("web").exists()

    def test_deleted_branch_disappears(self, origin: git.Repo, tmp_path: Path) -> None:
        """Test a branch removed from the remote is no longer live."""
        source = GitBranchSource(GitMirrorStore(tmp_path / "cache", timeout=30), timeout=30)
        target = make_target(origin.working_dir)
        source.live_branches(target)

        origin.delete_head("dev")

        assert source.live_branches(target) == {"main", "feature/ABC-123"}

    def test_mirror_error_propagates(self) -> None:
        """Test mirror failures are not turned into an empty branch set."""
        store = MagicMock(spec=MirrorStore)
        store.ensure.side_effect = MirrorError("unreachable")

        with pytest.raises(MirrorError, match="unreachable"):
            GitBranchSource(store).live_branches(make_target("git@example.com:org/web.git"))

    def test_listing_failure(self, origin: git.Repo, tmp_path: Path) -> None:
        """Test an ls-remote failure raises BranchListError."""
        store = GitMirrorStore(tmp_path / "cache", timeout=30)
        path = store.ensure("web", origin.working_dir)
        mirror = git.Repo(path)
        mirror.remote("origin").set_url(str(tmp_path / "gone"))
        mirror.close()
        fixed = MagicMock(spec=MirrorStore)
        fixed.ensure.return_value = path

        with pytest.raises(BranchListError, match="Failed to list branches"):
            GitBranchSource(fixed).live_branches(make_target(origin.working_dir))

    def test_not_a_repository(self, tmp_path: Path) -> None:
        """Test a mirror path that is not a repository raises BranchListError."""
        empty = tmp_path / "empty"
        empty.mkdir()
        store = MagicMock(spec=MirrorStore)
        store.ensure.return_value = empty

        with pytest.raises(BranchListError, match="Not a Git repository"):
            GitBranchSource(store).live_branches(make_target("git@example.com:org/web.git"))
