"""Bare mirror management backed by GitPython."""

import logging
from pathlib import Path

import git

from branch_reaper.vcs.base import MirrorStore
from branch_reaper.vcs.exceptions import MirrorError

logger = logging.getLogger(__name__)


class GitMirrorStore(MirrorStore):
    """Stores ``git clone --mirror`` copies under a cache directory."""

    def __init__(self, cache_dir: str | Path, timeout: float = 60.0) -> None:
        """Initialize the mirror store.

        Args:
            cache_dir: Directory holding one mirror per repository key
            timeout: Timeout in seconds for clone and refresh commands
        """
        self.cache_dir = Path(cache_dir).expanduser()
        self.timeout = timeout

    def mirror_path(self, repo_key: str) -> Path:
        """Get the mirror location for a repository key.

        Args:
            repo_key: Repository key

        Returns:
            Path of the mirror directory (which may not exist yet)
        """
        return self.cache_dir / repo_key

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
        path = self.mirror_path(repo_key)
        if path.exists():
            self._refresh(path, url)
        else:
            self._clone(path, url)
        return path

    def _clone(self, path: Path, url: str) -> None:
        logger.info(f"Creating mirror of {url} in {path}")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            git.Git(str(self.cache_dir)).clone(
                "--mirror",
                url,
                str(path),
                kill_after_timeout=self.timeout,
            )
        except (git.GitCommandError, OSError) as e:
            msg = f"Failed to create mirror of {url}: {e}"
            raise MirrorError(msg) from e

    def _refresh(self, path: Path, url: str) -> None:
        logger.debug(f"Refreshing mirror {path}")
        try:
            repo = git.Repo(path)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            msg = f"Not a Git repository: {path}"
            raise MirrorError(msg) from e

        try:
            origin = repo.remote("origin")
            if origin.url != url:
                logger.info(f"Repointing mirror {path} from {origin.url} to {url}")
                origin.set_url(url)
            repo.git.remote("update", "--prune", kill_after_timeout=self.timeout)
        except ValueError as e:
            msg = f"Mirror {path} has no 'origin' remote"
            raise MirrorError(msg) from e
        except git.GitCommandError as e:
            msg = f"Failed to refresh mirror of {url}: {e}"
            raise MirrorError(msg) from e
        finally:
            repo.close()
