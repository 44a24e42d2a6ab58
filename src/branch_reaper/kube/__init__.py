"""Kubernetes access through kubectl."""

from branch_reaper.kube.deleter import DeletionExecutor, build_delete_selector
from branch_reaper.kube.exceptions import KubeDeleteError, KubeError, KubeQueryError
from branch_reaper.kube.resources import DeployedBranchSource

__all__ = [
    "DeletionExecutor",
    "DeployedBranchSource",
    "KubeDeleteError",
    "KubeError",
    "KubeQueryError",
    "build_delete_selector",
]
