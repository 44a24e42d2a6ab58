"""Live branch discovery for Git remotes."""

import logging

import git

from branch_reaper.config.models import RepoTarget
from branch_reaper.vcs.base import BranchSource, MirrorStore
from branch_reaper.vcs.exceptions import BranchListError

logger = logging.getLogger(__name__)

HEADS_PREFIX = "refs/heads/"


def parse_ls_remote_heads(output: str) -> set[str]:
    """Parse ``git ls-remote --heads`` output into branch names.

    Args:
        output: Raw command output, one ``<sha>\\t<ref>`` line per head

    Returns:
        Branch names with the ``refs/heads/`` prefix removed

    Raises:
        BranchListError: If a line is not a head reference
    """
    branches: set[str] = set()
    for line in output.splitlines():
        if not line.strip():
            continue
        sha, sep, ref = line.partition("\t")
        if not sep or not sha.strip() or not ref.startswith(HEADS_PREFIX) or ref == HEADS_PREFIX:
            raise BranchListError(f"Unexpected ls-remote line: {line!r}")
        branches.add(ref[len(HEADS_PREFIX) :])
    return branches


class GitBranchSource(BranchSource):
    """Lists remote heads through a refreshed local mirror."""

    def __init__(self, mirror_store: MirrorStore, timeout: float = 60.0) -> None:
        """Initialize the branch source.

        Args:
            mirror_store: Store providing up-to-date mirrors
            timeout: Timeout in seconds for the ls-remote call
        """
        self.mirror_store = mirror_store
        self.timeout = timeout

    def live_branches(self, target: RepoTarget) -> set[str]:
        """Get the branch names currently present on the remote.

        Args:
            target: Repository target to inspect

        Returns:
            Branch names without the ``refs/heads/`` prefix

        Raises:
            MirrorError: If the mirror cannot be created or refreshed
            BranchListError: If listing or parsing remote heads fails
        """
        path = self.mirror_store.ensure(target.name, target.url)

        try:
            repo = git.Repo(path)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise BranchListError(f"Not a Git repository: {path}") from e

        try:
            output = repo.git.ls_remote("--heads", "origin", kill_after_timeout=self.timeout)
        except git.GitCommandError as e:
            raise BranchListError(f"Failed to list branches of {target.url}: {e}") from e
        finally:
            repo.close()

        branches = parse_ls_remote_heads(output)
        logger.debug(f"[{target.name}] {len(branches)} live branches on {target.url}")
        return branches
