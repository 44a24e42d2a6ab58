"""Top-level models for branch-reaper."""

from enum import Enum

from pydantic import BaseModel, Field


class DeployedBranches(BaseModel):
    """Branch names recovered from deployed resource annotations."""

    branches: set[str] = Field(default_factory=set, description="Union across resource types")
    failed_types: list[str] = Field(
        default_factory=list,
        description="Resource types whose query failed and contributed nothing",
    )

    @property
    def degraded(self) -> bool:
        """Check if any resource type query failed.

        Returns:
            True if the branch set is a partial result
        """
        return len(self.failed_types) > 0


class ReconcileResult(BaseModel):
    """Live, deployed and candidate branch sets for one target."""

    target: str
    live: set[str]
    deployed: set[str]
    candidates: set[str]
    failed_types: list[str] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """Check if the deployed set was built from partial query results.

        Returns:
            True if any resource type query failed
        """
        return len(self.failed_types) > 0

    @property
    def has_deployed(self) -> bool:
        """Check if any deployed branch was found.

        An empty deployed set cannot be told apart from a selector or
        namespace that matches nothing, so no deletion may follow from it.

        Returns:
            True if deletions may be considered
        """
        return len(self.deployed) > 0


class DeletionOutcome(BaseModel):
    """Result of deleting (or simulating deletion of) one branch's resources."""

    branch: str
    slug: str
    selector: str
    command: list[str]
    simulated: bool
    success: bool
    output: list[str] = Field(default_factory=list)
    error_message: str | None = None


class TargetStatus(str, Enum):
    """Final state of a target within a run."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class TargetResult(BaseModel):
    """Outcome of processing one configured target."""

    target: str
    status: TargetStatus
    reconcile: ReconcileResult | None = None
    deletions: list[DeletionOutcome] = Field(default_factory=list)
    message: str | None = None

    @property
    def deleted(self) -> int:
        """Number of candidates whose deletion succeeded or was simulated."""
        return sum(1 for d in self.deletions if d.success)

    @property
    def failed_deletions(self) -> int:
        """Number of candidates whose deletion failed."""
        return sum(1 for d in self.deletions if not d.success)


class RunSummary(BaseModel):
    """Summary of a reconciliation pass over all targets."""

    simulate: bool
    targets: list[TargetResult] = Field(default_factory=list)

    @property
    def total_candidates(self) -> int:
        """Count deletion candidates across all targets.

        Returns:
            Total number of candidates
        """
        return sum(len(t.reconcile.candidates) for t in self.targets if t.reconcile is not None)

    @property
    def has_failures(self) -> bool:
        """Check if any target or deletion failed.

        Returns:
            True if any target failed or any deletion failed
        """
        return any(t.status == TargetStatus.FAILED or t.failed_deletions > 0 for t in self.targets)
