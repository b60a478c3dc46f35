"""Unit tests for core.services.launcher_service module.

This file tests the BackupLauncherService class which runs the selector,
resolver and builder in order.

# Test Coverage

The tests cover:
  - End-to-end run against offline clients
  - Fail-fast: no lookups after a selection failure, no Job after a
    placement failure
  - Timeout forwarding to every stage
  - Client construction from settings and ClientInitError

# Running Tests

Run with: pytest tests/unit/services/test_launcher_service.py
"""

from unittest.mock import MagicMock, patch

import pytest
from fakes import HOST_0, HOST_1, FakeClusterClient, FakeDatabaseClient, replica_set_reply

from mongodb_backup_launcher.config import Settings
from mongodb_backup_launcher.core.exceptions import (
    ClientInitError,
    NoEligibleReplicaError,
    PlacementLookupError,
    StatusNotOKError,
    ZoneLabelMissingError,
)
from mongodb_backup_launcher.core.models import NodeInfo, PodInfo
from mongodb_backup_launcher.core.services import BackupLauncherService
from mongodb_backup_launcher.foundation.exceptions import UpstreamError

# =============================================================================
# Pipeline Tests
# =============================================================================


class TestBackupLauncherServiceRun:
    """Test suite for BackupLauncherService.run."""

    def test_run_submits_job_next_to_target(self, settings: Settings) -> None:
        """Test a full run: mongodb-1 is chosen, found in eu-west-1b, Job pinned there.

        **What it tests:**
          - The Job lands in the replica's namespace
          - Its affinity uses the target's zone
          - MONGO_HOSTLIST is the chosen SECONDARY
        """
        database = FakeDatabaseClient(
            reply=replica_set_reply(members=[(HOST_0, "PRIMARY"), (HOST_1, "SECONDARY")])
        )
        cluster = FakeClusterClient(
            pods=[PodInfo(name="mongodb-1", namespace="database", node_name="node2")],
            nodes=[NodeInfo(name="node2", labels={"topology.kubernetes.io/zone": "eu-west-1b"})],
        )
        service = BackupLauncherService.from_clients(settings, database, cluster)

        job = service.run()

        assert job.namespace == "database"
        namespace, manifest = cluster.created[0]
        assert namespace == "database"
        pod_spec = manifest["spec"]["template"]["spec"]
        zone_term = pod_spec["affinity"]["nodeAffinity"]["requiredDuringSchedulingIgnoredDuringExecution"][
            "nodeSelectorTerms"
        ][0]["matchExpressions"][0]
        assert zone_term["values"] == ["eu-west-1b"]
        env = {e["name"]: e.get("value") for e in pod_spec["containers"][0]["env"]}
        assert env["MONGO_HOSTLIST"] == HOST_1

    def test_selection_failure_skips_cluster(self, settings: Settings) -> None:
        """Test that no placement lookup happens after a selection failure."""
        database = FakeDatabaseClient(reply=replica_set_reply(ok=0))
        cluster = FakeClusterClient()
        service = BackupLauncherService.from_clients(settings, database, cluster)

        with pytest.raises(StatusNotOKError):
            service.run()

        assert cluster.calls == []

    def test_no_eligible_replica_skips_cluster(self, settings: Settings) -> None:
        database = FakeDatabaseClient(reply=replica_set_reply(members=[(HOST_0, "PRIMARY")]))
        cluster = FakeClusterClient()
        service = BackupLauncherService.from_clients(settings, database, cluster)

        with pytest.raises(NoEligibleReplicaError):
            service.run()

        assert cluster.calls == []

    def test_placement_failure_submits_nothing(
        self, launcher_service: BackupLauncherService, cluster_client: FakeClusterClient
    ) -> None:
        """Test that no Job is created when the zone cannot be resolved.

        **Why this test is important:**
          - A Job without a zone pin could land anywhere
        """
        # mongodb-1 sits on a node without a zone label in the fixture cluster
        with pytest.raises(ZoneLabelMissingError):
            launcher_service.run()

        assert cluster_client.created == []
        assert "create_job" not in [call[0] for call in cluster_client.calls]

    def test_lookup_failure_propagates_unchanged(self, settings: Settings) -> None:
        database = FakeDatabaseClient(reply=replica_set_reply(members=[(HOST_1, "SECONDARY")]))
        cluster = FakeClusterClient(pod_error=UpstreamError("connection refused"))
        service = BackupLauncherService.from_clients(settings, database, cluster)

        with pytest.raises(PlacementLookupError) as exc_info:
            service.run()

        assert exc_info.value.not_found is False
        assert cluster.created == []

    def test_timeout_reaches_every_call(self, settings: Settings) -> None:
        database = FakeDatabaseClient(reply=replica_set_reply(members=[(HOST_0, "SECONDARY")]))
        cluster = FakeClusterClient(
            pods=[PodInfo(name="mongodb-0", namespace="database", node_name="node1")],
            nodes=[NodeInfo(name="node1", labels={"topology.kubernetes.io/zone": "eu-west-1a"})],
        )
        service = BackupLauncherService.from_clients(settings, database, cluster)

        service.run(timeout=30)

        assert [timeout for _, timeout in database.calls] == [30]
        assert [call[2] for call in cluster.calls] == [30, 30, 30]

    def test_exclusion_comes_from_settings(self, settings: Settings) -> None:
        excluded = settings.model_copy(update={"exclude_replica": HOST_1})
        database = FakeDatabaseClient(
            reply=replica_set_reply(members=[(HOST_1, "SECONDARY"), (HOST_0, "SECONDARY")])
        )

        service = BackupLauncherService.from_clients(excluded, database, FakeClusterClient())

        assert service.selector.select_target() == HOST_0


    def test_close_releases_both_clients(self, settings: Settings) -> None:
        """Test that close() releases the MongoDB and Kubernetes clients."""
        database, cluster = FakeDatabaseClient(), FakeClusterClient()
        service = BackupLauncherService.from_clients(settings, database, cluster)

        service.close()

        assert database.closed is True
        assert cluster.closed is True

    def test_close_releases_cluster_when_database_close_fails(self, settings: Settings) -> None:
        database, cluster = MagicMock(), FakeClusterClient()
        database.close.side_effect = RuntimeError("socket already closed")
        service = BackupLauncherService.from_clients(settings, database, cluster)

        with pytest.raises(RuntimeError):
            service.close()

        assert cluster.closed is True


# =============================================================================
# Construction Tests
# =============================================================================


class TestBackupLauncherServiceFromSettings:
    """Test suite for BackupLauncherService.from_settings."""

    def test_builds_real_clients_from_settings(self, settings: Settings) -> None:
        database, cluster = MagicMock(), MagicMock()
        with (
            patch(
                "mongodb_backup_launcher.core.services.launcher_service.create_database_client",
                return_value=database,
            ) as create_db,
            patch(
                "mongodb_backup_launcher.core.services.launcher_service.create_cluster_client",
                return_value=cluster,
            ) as create_cluster,
        ):
            service = BackupLauncherService.from_settings(settings)

        create_db.assert_called_once_with(settings.mongodb)
        create_cluster.assert_called_once_with(settings.kubernetes)
        assert service.selector.database_client is database
        assert service.resolver.cluster_client is cluster
        assert service.builder.cluster_client is cluster
        assert service.builder.image == settings.docker_image_uri

    def test_cluster_client_failure_raises_client_init_error(self, settings: Settings) -> None:
        """Test that a kubeconfig failure maps to ClientInitError and closes MongoDB."""
        database = MagicMock()
        with (
            patch(
                "mongodb_backup_launcher.core.services.launcher_service.create_database_client",
                return_value=database,
            ),
            patch(
                "mongodb_backup_launcher.core.services.launcher_service.create_cluster_client",
                side_effect=UpstreamError("building K8s client config from the cluster"),
            ),
            pytest.raises(ClientInitError) as exc_info,
        ):
            BackupLauncherService.from_settings(settings)

        assert exc_info.value.exit_code == 2
        database.close.assert_called_once()

    def test_database_client_failure_raises_client_init_error(self, settings: Settings) -> None:
        with (
            patch(
                "mongodb_backup_launcher.core.services.launcher_service.create_database_client",
                side_effect=UpstreamError("creating MongoDB client: bad URI"),
            ),
            pytest.raises(ClientInitError),
        ):
            BackupLauncherService.from_settings(settings)
