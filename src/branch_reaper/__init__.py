"""branch-reaper: remove branch-scoped Kubernetes resources whose Git branch is gone."""

__version__ = "0.1.0"
