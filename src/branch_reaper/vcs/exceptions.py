"""VCS exceptions for branch-reaper.

Any of these raised while reconciling a target means its live branch set is
unknown, so the target is skipped rather than treated as having no branches.
"""


class VCSError(Exception):
    """Base exception for all VCS-related errors."""


class MirrorError(VCSError):
    """Raised when a local mirror cannot be created or refreshed."""


class BranchListError(VCSError):
    """Raised when remote branches cannot be listed or parsed."""
