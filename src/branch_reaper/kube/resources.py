"""Discovery of branch names recorded on deployed resources."""

import asyncio
import json
import logging
from typing import Any

from branch_reaper.kube.exceptions import KubeQueryError
from branch_reaper.kube.utils import format_command, run_command
from branch_reaper.models import DeployedBranches

logger = logging.getLogger(__name__)


def extract_annotation_values(payload: dict[str, Any], annotation_key: str) -> set[str]:
    """Collect non-empty annotation values from a ``kubectl get -o json`` list.

    Args:
        payload: Decoded JSON list object with an ``items`` array
        annotation_key: Annotation to read from each item's metadata

    Returns:
        Annotation values; items without the annotation or with an empty
        value are skipped

    Raises:
        KubeQueryError: If the payload is not a resource list
    """
    items = payload.get("items")
    if not isinstance(items, list):
        raise KubeQueryError("Response has no 'items' list")

    values: set[str] = set()
    for item in items:
        metadata = item.get("metadata") if isinstance(item, dict) else None
        annotations = metadata.get("annotations") if isinstance(metadata, dict) else None
        if not isinstance(annotations, dict):
            continue
        value = annotations.get(annotation_key)
        if isinstance(value, str) and value.strip():
            values.add(value)
    return values


class DeployedBranchSource:
    """Reads branch annotations from resources through kubectl."""

    def __init__(self, kubectl: str = "kubectl", timeout: float = 5.0) -> None:
        """Initialize the resource branch source.

        Args:
            kubectl: kubectl binary to invoke
            timeout: Timeout in seconds for each query
        """
        self.kubectl = kubectl
        self.timeout = timeout

    def _get_command(self, namespace: str, label_selector: str, resource_type: str) -> list[str]:
        cmd = [self.kubectl, "get", resource_type, "--namespace", namespace]
        if label_selector:
            cmd.extend(["--selector", label_selector])
        cmd.extend(["--output", "json", f"--request-timeout={self.timeout:g}s"])
        return cmd

    async def list_annotations(
        self,
        namespace: str,
        label_selector: str,
        resource_type: str,
        annotation_key: str,
    ) -> set[str]:
        """Get annotation values of one resource type.

        Args:
            namespace: Namespace to query
            label_selector: Label selector the resources must match
            resource_type: Resource type to list (e.g. ``deployments``)
            annotation_key: Annotation holding the branch name

        Returns:
            Branch names found on resources of this type

        Raises:
            KubeQueryError: If the query fails, times out or returns bad JSON
        """
        cmd = self._get_command(namespace, label_selector, resource_type)
        logger.debug(f"Running: {format_command(cmd)}")

        try:
            result = await run_command(cmd, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            msg = f"Listing {resource_type} in {namespace} timed out after {self.timeout:g}s"
            raise KubeQueryError(msg, resource_type) from e
        except OSError as e:
            msg = f"Failed to run {self.kubectl}: {e}"
            raise KubeQueryError(msg, resource_type) from e

        if not result.success:
            msg = f"Listing {resource_type} in {namespace} failed (exit {result.exit_code}): {result.stderr.strip()}"
            raise KubeQueryError(msg, resource_type)

        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON listing {resource_type} in {namespace}: {e}"
            raise KubeQueryError(msg, resource_type) from e

        if not isinstance(payload, dict):
            raise KubeQueryError(f"Unexpected response listing {resource_type} in {namespace}", resource_type)

        try:
            return extract_annotation_values(payload, annotation_key)
        except KubeQueryError as e:
            raise KubeQueryError(f"Listing {resource_type} in {namespace}: {e}", resource_type) from e

    async def deployed_branches(
        self,
        namespace: str,
        label_selector: str,
        resource_types: list[str],
        annotation_key: str,
    ) -> DeployedBranches:
        """Union branch annotations across resource types.

        Types are queried one after another. A failing type is logged and
        contributes nothing; it is recorded in ``failed_types``.

        Args:
            namespace: Namespace to query
            label_selector: Label selector the resources must match
            resource_types: Resource types to list
            annotation_key: Annotation holding the branch name

        Returns:
            DeployedBranches with the union and the failed types
        """
        branches: set[str] = set()
        failed_types: list[str] = []

        for resource_type in resource_types:
            try:
                found = await self.list_annotations(namespace, label_selector, resource_type, annotation_key)
            except KubeQueryError as e:
                logger.warning(f"Ignoring {resource_type} in namespace {namespace}: {e}")
                failed_types.append(resource_type)
                continue

            logger.debug(f"{namespace}/{resource_type}: {len(found)} branches")
            branches |= found

        return DeployedBranches(branches=branches, failed_types=failed_types)
