"""External service clients (MongoDB, Kubernetes).

This module provides factory functions for creating configured client
instances from centralized configuration.
"""

from mongodb_backup_launcher.config import KubernetesConfig, MongoDBConfig, get_settings

from .interfaces import ClusterClient, ReplicaSetCommandClient
from .k8s import KubernetesClusterClient
from .mongodb import MongoCommandClient


def create_database_client(config: MongoDBConfig | None = None) -> ReplicaSetCommandClient:
    """Create a configured MongoDB command client.

    Args:
        config: Optional MongoDBConfig. If None, uses settings from
        get_settings().

    Returns:
        MongoCommandClient bound to the admin database.

    Example:
        ```python
        from mongodb_backup_launcher.clients import create_database_client

        mongo = create_database_client()
        status = mongo.run_command({"replSetGetStatus": 1})
        ```
    """
    if config is None:
        config = get_settings().mongodb

    return MongoCommandClient.from_config(config)


def create_cluster_client(config: KubernetesConfig | None = None) -> ClusterClient:
    """Create a configured Kubernetes client.

    Args:
        config: Optional KubernetesConfig. If None, uses settings from
        get_settings().

    Returns:
        KubernetesClusterClient using in-cluster or kubeconfig credentials.
    """
    if config is None:
        config = get_settings().kubernetes

    return KubernetesClusterClient.from_config(config)


__all__ = [
    "ClusterClient",
    "KubernetesClusterClient",
    "MongoCommandClient",
    "ReplicaSetCommandClient",
    "create_cluster_client",
    "create_database_client",
]
