"""Kubernetes client for placement lookups and backup Job submission.

This module wraps the official `kubernetes` Python client behind the
`ClusterClient` interface: reading pods and nodes through `CoreV1Api` and
creating `batch/v1` Jobs through `BatchV1Api`.
"""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from mongodb_backup_launcher.clients.interfaces.cluster import ClusterClient
from mongodb_backup_launcher.config import KubernetesConfig
from mongodb_backup_launcher.core.models import NodeInfo, PodInfo, SubmittedJob
from mongodb_backup_launcher.foundation.exceptions import ResourceNotFoundError, UpstreamError

logger = logging.getLogger("backup_launcher.k8s")


class KubernetesClusterClient(ClusterClient):
    """Client for the Kubernetes core and batch APIs.

    Example:
        >>> cluster = KubernetesClusterClient(KubernetesConfig(running_locally=True))
        >>> pod = cluster.get_pod("database", "mongodb-1")
        >>> node = cluster.get_node(pod.node_name)
        >>> node.labels["topology.kubernetes.io/zone"]
        'eu-west-1a'
    """

    def __init__(self, k8s_config: KubernetesConfig | None = None) -> None:
        """Load cluster credentials and create the API objects.

        Args:
            k8s_config: Where to load credentials from. Defaults to in-cluster.

        Raises:
            UpstreamError: If the credentials cannot be loaded.
        """
        k8s_config = k8s_config or KubernetesConfig()
        try:
            if k8s_config.running_locally:
                config.load_kube_config(config_file=k8s_config.kubeconfig_path)
                logger.info("Loaded kubeconfig from local machine")
            else:
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration")
        except (config.ConfigException, OSError) as e:
            source = "the local host" if k8s_config.running_locally else "the cluster"
            msg = f"building K8s client config from {source}: {e}"
            raise UpstreamError(msg) from e

        self.api_client = client.ApiClient()
        self.core_api = client.CoreV1Api(self.api_client)
        self.batch_api = client.BatchV1Api(self.api_client)

    @classmethod
    def from_config(cls, config: KubernetesConfig) -> KubernetesClusterClient:
        return cls(config)

    def get_pod(self, namespace: str, name: str, timeout: float | None = None) -> PodInfo:
        """Read a pod by name.

        Raises:
            ResourceNotFoundError: If the pod or namespace does not exist.
            UpstreamError: If the API call fails for any other reason.
        """
        try:
            pod = self.core_api.read_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=timeout
            )
        except ApiException as e:
            if e.status == 404:
                raise ResourceNotFoundError(
                    "pod", name, f"pod {name} not found in namespace {namespace}"
                ) from e
            msg = f"reading pod {namespace}/{name}: {e.status} {e.reason}"
            raise UpstreamError(msg) from e
        except TransportError as e:
            msg = f"reading pod {namespace}/{name}: {e}"
            raise UpstreamError(msg) from e

        node_name = pod.spec.node_name if pod.spec is not None else None
        logger.debug("Pod is running on node", extra={"pod": name, "node": node_name})
        return PodInfo(
            name=pod.metadata.name,
            namespace=pod.metadata.namespace or namespace,
            node_name=node_name or None,
        )

    def get_node(self, name: str, timeout: float | None = None) -> NodeInfo:
        """Read a node by name.

        Raises:
            ResourceNotFoundError: If the node does not exist.
            UpstreamError: If the API call fails for any other reason.
        """
        try:
            node = self.core_api.read_node(name=name, _request_timeout=timeout)
        except ApiException as e:
            if e.status == 404:
                raise ResourceNotFoundError("node", name) from e
            msg = f"reading node {name}: {e.status} {e.reason}"
            raise UpstreamError(msg) from e
        except TransportError as e:
            msg = f"reading node {name}: {e}"
            raise UpstreamError(msg) from e

        return NodeInfo(name=node.metadata.name, labels=node.metadata.labels or {})

    def create_job(
        self, namespace: str, manifest: dict[str, Any], timeout: float | None = None
    ) -> SubmittedJob:
        """Create a Job from a manifest dictionary.

        Raises:
            UpstreamError: If the API rejects the Job or cannot be reached.
        """
        try:
            job = self.batch_api.create_namespaced_job(
                namespace=namespace, body=manifest, _request_timeout=timeout
            )
        except ApiException as e:
            logger.error(
                "Failed to create Job",
                extra={
                    "namespace": namespace,
                    "status": e.status,
                    "reason": e.reason,
                    "body": e.body,
                },
            )
            msg = f"creating Job in namespace {namespace}: {e.status} {e.reason}"
            raise UpstreamError(msg) from e
        except TransportError as e:
            msg = f"creating Job in namespace {namespace}: {e}"
            raise UpstreamError(msg) from e

        return SubmittedJob(
            name=job.metadata.name,
            namespace=job.metadata.namespace or namespace,
            uid=job.metadata.uid,
        )

    def close(self) -> None:
        self.api_client.close()
