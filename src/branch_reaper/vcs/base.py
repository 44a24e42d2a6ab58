"""Abstract base classes for source-control access.

The reconciler only needs two things from source control: a local mirror of
each configured repository and the set of branch names live on its remote.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from branch_reaper.config.models import RepoTarget


class MirrorStore(ABC):
    """Keeps one local mirror per repository key."""

    @abstractmethod
    def ensure(self, repo_key: str, url: str) -> Path:
        """Create the mirror on first use, refresh it otherwise.

        Args:
            repo_key: Repository key, used as the mirror directory name
            url: Repository locator

        Returns:
            Path to the up-to-date local mirror

        Raises:
            MirrorError: If the mirror cannot be created or refreshed
        """


class BranchSource(ABC):
    """Provides the set of branch names live in a repository."""

    @abstractmethod
    def live_branches(self, target: RepoTarget) -> set[str]:
        """Get the branch names currently present on the remote.

        An empty set means the repository has no branches at all. Failures
        are raised, never reported as an empty set.

        Args:
            target: Repository target to inspect

        Returns:
            Branch names without the ``refs/heads/`` prefix

        Raises:
            VCSError: If the branches cannot be determined
        """
