"""Label-selector based deletion of branch resources."""

import asyncio
import logging

from branch_reaper.config.models import format_label_selector
from branch_reaper.kube.exceptions import KubeDeleteError
from branch_reaper.kube.utils import CommandResult, format_command, run_command
from branch_reaper.models import DeletionOutcome
from branch_reaper.slug import slug

logger = logging.getLogger(__name__)


def build_delete_selector(delete_labels: dict[str, str], branch_label: str, branch_slug: str) -> str:
    """Combine the static delete labels with the branch label.

    Args:
        delete_labels: Static labels shared by all branch deployments
        branch_label: Label key carrying the branch slug
        branch_slug: Slug of the branch to delete

    Returns:
        Selector string in stable key order
    """
    labels = dict(delete_labels)
    labels[branch_label] = branch_slug
    return format_label_selector(labels)


class DeletionExecutor:
    """Deletes, or reports, the resources of a removed branch."""

    def __init__(self, kubectl: str = "kubectl", timeout: float = 5.0) -> None:
        """Initialize the executor.

        Args:
            kubectl: kubectl binary to invoke
            timeout: Timeout in seconds for each delete command
        """
        self.kubectl = kubectl
        self.timeout = timeout

    def delete_command(self, namespace: str, kinds: list[str], selector: str) -> list[str]:
        """Build the kubectl delete command.

        Args:
            namespace: Namespace holding the resources
            kinds: Resource kinds to delete
            selector: Combined label selector

        Returns:
            Command as a list of strings
        """
        return [
            self.kubectl,
            "delete",
            ",".join(kinds),
            "--namespace",
            namespace,
            "--selector",
            selector,
            f"--request-timeout={self.timeout:g}s",
        ]

    async def apply(
        self,
        namespace: str,
        delete_labels: dict[str, str],
        branch_label: str,
        branch_name: str,
        kinds: list[str],
        simulate: bool,
        prefix: str = "",
    ) -> DeletionOutcome:
        """Delete the resources belonging to one branch.

        In simulate mode nothing is executed; the command that would run is
        logged and returned.

        Args:
            namespace: Namespace holding the resources
            delete_labels: Static labels of the delete selector
            branch_label: Label key carrying the branch slug
            branch_name: Branch whose resources are removed
            kinds: Resource kinds to delete
            simulate: If True, only report the deletion
            prefix: Prefix prepended to the branch name before slugging

        Returns:
            DeletionOutcome describing what ran (or would run)
        """
        branch_slug = slug(prefix + branch_name)
        selector = build_delete_selector(delete_labels, branch_label, branch_slug)
        cmd = self.delete_command(namespace, kinds, selector)

        outcome = DeletionOutcome(
            branch=branch_name,
            slug=branch_slug,
            selector=selector,
            command=cmd,
            simulated=simulate,
            success=False,
        )

        if not branch_slug:
            outcome.error_message = f"Branch {branch_name!r} has an empty slug; refusing to delete with {selector!r}"
            logger.error(f"[{namespace}] {outcome.error_message}")
            return outcome

        if simulate:
            logger.info(f"[{namespace}] Would delete branch {branch_name!r}: {format_command(cmd)}")
            outcome.success = True
            return outcome

        logger.info(f"[{namespace}] Deleting branch {branch_name!r}: {format_command(cmd)}")
        try:
            result = await self._run_delete(cmd)
        except KubeDeleteError as e:
            outcome.error_message = str(e)
            logger.error(f"[{namespace}] Deleting branch {branch_name!r} failed: {e}")
            return outcome

        outcome.output = [line for line in (result.stdout + result.stderr).splitlines() if line.strip()]
        for line in outcome.output:
            logger.info(f"[{namespace}] {line}")

        if result.success:
            outcome.success = True
        else:
            outcome.error_message = f"{self.kubectl} delete exited with {result.exit_code}"
            logger.error(f"[{namespace}] Deleting branch {branch_name!r} failed: {outcome.error_message}")
        return outcome

    async def _run_delete(self, cmd: list[str]) -> CommandResult:
        try:
            return await run_command(cmd, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            msg = f"Delete timed out after {self.timeout:g}s"
            raise KubeDeleteError(msg) from e
        except OSError as e:
            msg = f"Failed to run {self.kubectl}: {e}"
            raise KubeDeleteError(msg) from e
