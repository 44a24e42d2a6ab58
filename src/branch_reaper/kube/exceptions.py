"""Kubernetes-specific exceptions."""


class KubeError(Exception):
    """Base exception for Kubernetes errors."""


class KubeQueryError(KubeError):
    """Listing resources of one type failed."""

    def __init__(self, message: str, resource_type: str | None = None) -> None:
        """Initialize query error.

        Args:
            message: Error message
            resource_type: Resource type whose query failed, if known
        """
        super().__init__(message)
        self.resource_type = resource_type


class KubeDeleteError(KubeError):
    """A delete command failed."""
