"""Computation of deletion candidates for a repository target."""

import asyncio
import logging

from branch_reaper.config.models import RepoTarget
from branch_reaper.kube.resources import DeployedBranchSource
from branch_reaper.models import ReconcileResult
from branch_reaper.vcs.base import BranchSource

logger = logging.getLogger(__name__)


def compute_candidates(deployed: set[str], live: set[str]) -> set[str]:
    """Get the deployed branches that no longer exist in the repository.

    Args:
        deployed: Branch names recorded on deployed resources
        live: Branch names present on the remote

    Returns:
        ``deployed - live``
    """
    return deployed - live


class Reconciler:
    """Compares live branches with the branches deployed for a target."""

    def __init__(self, branch_source: BranchSource, resource_source: DeployedBranchSource) -> None:
        """Initialize the reconciler.

        Args:
            branch_source: Source of live branch names
            resource_source: Source of branch names on deployed resources
        """
        self.branch_source = branch_source
        self.resource_source = resource_source

    async def reconcile(self, target: RepoTarget) -> ReconcileResult:
        """Build the live, deployed and candidate sets for a target.

        Live branches are read first, in a worker thread, so that a
        source-control failure skips the target before any cluster query
        is made.

        Args:
            target: Repository target to reconcile

        Returns:
            ReconcileResult for the target

        Raises:
            VCSError: If the live branch set cannot be determined
        """
        # GitPython blocks; keep it off the event loop
        live = await asyncio.to_thread(self.branch_source.live_branches, target)
        deployed = await self.resource_source.deployed_branches(
            namespace=target.namespace,
            label_selector=target.query_selector,
            resource_types=target.resource_types,
            annotation_key=target.branch_annotation,
        )

        return ReconcileResult(
            target=target.name,
            live=live,
            deployed=deployed.branches,
            candidates=compute_candidates(deployed.branches, live),
            failed_types=deployed.failed_types,
        )
