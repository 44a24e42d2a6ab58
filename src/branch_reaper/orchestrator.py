"""Reconciliation pass over all configured targets."""

import logging

from branch_reaper.config import ReaperSettings, RepoTarget
from branch_reaper.kube.deleter import DeletionExecutor
from branch_reaper.kube.resources import DeployedBranchSource
from branch_reaper.models import ReconcileResult, RunSummary, TargetResult, TargetStatus
from branch_reaper.reconciler import Reconciler
from branch_reaper.vcs.exceptions import VCSError
from branch_reaper.vcs.git.branch_source import GitBranchSource
from branch_reaper.vcs.git.mirror import GitMirrorStore

logger = logging.getLogger(__name__)


class ReaperOrchestrator:
    """Orchestrates a reconciliation pass.

    Coordinates, per target:
    - Mirror refresh and live branch listing
    - Deployed branch discovery
    - Candidate computation and the empty-deployed guard
    - Deletion (or simulation) of every candidate
    """

    def __init__(
        self,
        settings: ReaperSettings,
        reconciler: Reconciler | None = None,
        executor: DeletionExecutor | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Process-wide settings
            reconciler: Reconciler to use (default: Git mirror + kubectl)
            executor: Deletion executor to use (default: kubectl)
        """
        self.settings = settings
        if reconciler is None:
            mirror_store = GitMirrorStore(settings.cache_dir, timeout=settings.git_timeout)
            reconciler = Reconciler(
                branch_source=GitBranchSource(mirror_store, timeout=settings.git_timeout),
                resource_source=DeployedBranchSource(settings.kubectl, timeout=settings.request_timeout),
            )
        self.reconciler = reconciler
        self.executor = executor or DeletionExecutor(settings.kubectl, timeout=settings.request_timeout)

    async def run(self, targets: list[RepoTarget], simulate: bool = True) -> RunSummary:
        """Reconcile every target in order.

        A failure while processing one target is logged and recorded; the
        remaining targets are still processed.

        Args:
            targets: Targets to reconcile
            simulate: If True, report deletions without executing them

        Returns:
            RunSummary with one TargetResult per target
        """
        summary = RunSummary(simulate=simulate)
        mode = "simulate" if simulate else "live"
        logger.info(f"Reconciling {len(targets)} targets ({mode} mode)")

        for target in targets:
            try:
                result = await self.process_target(target, simulate)
            except VCSError as e:
                logger.error(f"[{target.name}] Skipping target, source control failed: {e}")
                result = TargetResult(target=target.name, status=TargetStatus.FAILED, message=str(e))
            except Exception as e:
                logger.exception(f"[{target.name}] Skipping target after unexpected error: {e}")
                result = TargetResult(target=target.name, status=TargetStatus.FAILED, message=str(e))
            summary.targets.append(result)

        return summary

    async def process_target(self, target: RepoTarget, simulate: bool) -> TargetResult:
        """Reconcile one target and delete its candidates.

        Args:
            target: Target to process
            simulate: If True, report deletions without executing them

        Returns:
            TargetResult for the target

        Raises:
            VCSError: If the live branch set cannot be determined
        """
        reconciled = await self.reconciler.reconcile(target)
        self._log_sets(target, reconciled)

        skip_reason = self._skip_reason(target, reconciled)
        if skip_reason:
            return TargetResult(
                target=target.name,
                status=TargetStatus.SKIPPED,
                reconcile=reconciled,
                message=skip_reason,
            )

        result = TargetResult(target=target.name, status=TargetStatus.COMPLETED, reconcile=reconciled)
        for branch in sorted(reconciled.candidates):
            outcome = await self.executor.apply(
                namespace=target.namespace,
                delete_labels=target.delete_labels,
                branch_label=target.branch_label,
                branch_name=branch,
                kinds=target.delete_kinds,
                simulate=simulate,
                prefix=target.branch_prefix,
            )
            result.deletions.append(outcome)

        if result.failed_deletions:
            logger.warning(f"[{target.name}] {result.failed_deletions} of {len(result.deletions)} deletions failed")
        return result

    def _log_sets(self, target: RepoTarget, reconciled: ReconcileResult) -> None:
        logger.info(
            f"[{target.name}] live={len(reconciled.live)} deployed={len(reconciled.deployed)} "
            f"candidates={len(reconciled.candidates)}"
        )
        if reconciled.candidates:
            logger.debug(f"[{target.name}] candidates: {', '.join(sorted(reconciled.candidates))}")

    def _skip_reason(self, target: RepoTarget, reconciled: ReconcileResult) -> str | None:
        """Decide whether deletions must not happen for a target.

        Args:
            target: Target being processed
            reconciled: Its reconciliation result

        Returns:
            Reason for skipping, or None when candidates may be deleted
        """
        if reconciled.degraded:
            logger.warning(
                f"[{target.name}] Queries failed for {', '.join(reconciled.failed_types)} in namespace "
                f"{target.namespace}; deployed branches are a partial result and live resources may look deletable"
            )
            if self.settings.abort_on_degraded:
                return f"resource queries failed for {', '.join(reconciled.failed_types)}"

        if not reconciled.has_deployed:
            logger.info(f"[{target.name}] No deployed branches found, no cleanup needed")
            return "no cleanup needed"

        if not reconciled.live:
            logger.warning(
                f"[{target.name}] Repository reports no branches; every deployed branch is a deletion candidate"
            )

        if not reconciled.candidates:
            logger.info(f"[{target.name}] All deployed branches are live, nothing to delete")

        return None
