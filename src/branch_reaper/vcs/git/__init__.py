"""Git implementation of the source-control interfaces."""

from branch_reaper.vcs.git.branch_source import GitBranchSource
from branch_reaper.vcs.git.mirror import GitMirrorStore

__all__ = ["GitBranchSource", "GitMirrorStore"]
