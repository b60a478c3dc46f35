"""Shared fixtures for unit tests.

This module provides the offline MongoDB and Kubernetes doubles from
`fakes`, plus settings and service fixtures built on top of them.
"""

# pylint: disable=redefined-outer-name
# Pytest fixtures intentionally redefine fixture names - this is expected behavior

from __future__ import annotations

from typing import Any

import pytest
from fakes import HOST_0, HOST_1, HOST_2, FakeClusterClient, FakeDatabaseClient, replica_set_reply

from mongodb_backup_launcher.config import (
    BackupJobConfig,
    KubernetesConfig,
    MongoDBConfig,
    Settings,
)
from mongodb_backup_launcher.core.models import NodeInfo, PodInfo
from mongodb_backup_launcher.core.services import (
    BackupLauncherService,
    JobBuilder,
    PlacementResolver,
    ReplicaSelector,
)

# =============================================================================
# Client Fixtures
# =============================================================================


@pytest.fixture
def three_member_reply() -> dict[str, Any]:
    """A healthy PRIMARY + two SECONDARY replica set."""
    return replica_set_reply(
        ok=1,
        members=[(HOST_0, "PRIMARY"), (HOST_1, "SECONDARY"), (HOST_2, "SECONDARY")],
    )


@pytest.fixture
def database_client(three_member_reply: dict[str, Any]) -> FakeDatabaseClient:
    return FakeDatabaseClient(reply=three_member_reply)


@pytest.fixture
def cluster_client() -> FakeClusterClient:
    """Cluster with the scenario pods: one healthy, one on an unlabelled node,
    one on a node that no longer exists."""
    return FakeClusterClient(
        pods=[
            PodInfo(name="mongodb-0", namespace="database", node_name="node1"),
            PodInfo(name="mongodb-1", namespace="database", node_name="no-az-label"),
            PodInfo(name="mongodb-2", namespace="database", node_name="missing-node"),
        ],
        nodes=[
            NodeInfo(name="node1", labels={"topology.kubernetes.io/zone": "eu-west-1a"}),
            NodeInfo(name="no-az-label", labels={}),
        ],
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Create Settings for testing without reading the environment."""
    return Settings(
        mongodb=MongoDBConfig(uri="mongodb://mongodb.database:27017", username="backup", password="secret"),
        kubernetes=KubernetesConfig(running_locally=True),
        job=BackupJobConfig(),
        docker_image_uri="registry.example.com/mongodb-backups:1.4.0",
        exclude_replica="",
        backup_type="daily",
        hostname="launcher-7d9f",
    )


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def job_builder(cluster_client: FakeClusterClient) -> JobBuilder:
    return JobBuilder(
        cluster_client,
        image="registry.example.com/mongodb-backups:1.4.0",
        backup_type="daily",
        created_by="launcher-7d9f",
    )


@pytest.fixture
def placement_resolver(cluster_client: FakeClusterClient) -> PlacementResolver:
    return PlacementResolver(cluster_client)


@pytest.fixture
def replica_selector(database_client: FakeDatabaseClient) -> ReplicaSelector:
    return ReplicaSelector(database_client)


@pytest.fixture
def launcher_service(
    settings: Settings, database_client: FakeDatabaseClient, cluster_client: FakeClusterClient
) -> BackupLauncherService:
    return BackupLauncherService.from_clients(settings, database_client, cluster_client)


