"""Cluster orchestration API interface.

This module defines the `ClusterClient` ABC: the three Kubernetes operations
the launcher performs. The kubernetes-library implementation lives in
`clients.k8s`; tests substitute an offline fake holding pods and nodes in
memory.
"""

from abc import ABC, abstractmethod
from typing import Any

from mongodb_backup_launcher.config import KubernetesConfig
from mongodb_backup_launcher.core.models import NodeInfo, PodInfo, SubmittedJob


class ClusterClient(ABC):
    """Abstract base class for the orchestration API.

    Every method accepts a `timeout` that is forwarded unmodified to the
    underlying API call.
    """

    @abstractmethod
    def get_pod(self, namespace: str, name: str, timeout: float | None = None) -> PodInfo:
        """Read a pod by name.

        Args:
            namespace: Namespace of the pod.
            name: Pod name.
            timeout: Per-call deadline in seconds.

        Returns:
            The pod's name, namespace and node name.

        Raises:
            ResourceNotFoundError: If the pod (or namespace) does not exist.
            UpstreamError: For any other API or transport error.
        """

    @abstractmethod
    def get_node(self, name: str, timeout: float | None = None) -> NodeInfo:
        """Read a node by name.

        Args:
            name: Node name.
            timeout: Per-call deadline in seconds.

        Returns:
            The node's name and labels.

        Raises:
            ResourceNotFoundError: If the node does not exist.
            UpstreamError: For any other API or transport error.
        """

    @abstractmethod
    def create_job(
        self, namespace: str, manifest: dict[str, Any], timeout: float | None = None
    ) -> SubmittedJob:
        """Create a `batch/v1` Job.

        Args:
            namespace: Namespace to create the Job in.
            manifest: Job manifest dictionary.
            timeout: Per-call deadline in seconds.

        Returns:
            Handle of the created Job.

        Raises:
            UpstreamError: If the API rejects the Job or cannot be reached.
        """

    def close(self) -> None:  # noqa: B027
        """Release the connection pool behind the API objects.

        Note:
            Not abstract, since in-memory clients hold nothing to release.
        """

    @classmethod
    @abstractmethod
    def from_config(cls, config: KubernetesConfig) -> "ClusterClient":
        """Create a client instance from KubernetesConfig."""
