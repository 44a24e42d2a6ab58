"""Source-control access for branch-reaper.

Provides the mirror store and live branch source used by the reconciler.
"""

from branch_reaper.vcs.base import BranchSource, MirrorStore
from branch_reaper.vcs.exceptions import BranchListError, MirrorError, VCSError

__all__ = [
    "BranchListError",
    "BranchSource",
    "MirrorError",
    "MirrorStore",
    "VCSError",
]
