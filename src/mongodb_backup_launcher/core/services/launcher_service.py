"""Service running the launcher pipeline end to end.

select target replica → resolve its zone and namespace → submit the Job.
Each stage raises its own `LauncherError`; the first one stops the run.
"""

from __future__ import annotations

import logging

from mongodb_backup_launcher.clients import create_cluster_client, create_database_client
from mongodb_backup_launcher.clients.interfaces import ClusterClient, ReplicaSetCommandClient
from mongodb_backup_launcher.config import Settings
from mongodb_backup_launcher.core.exceptions import ClientInitError, UpstreamError
from mongodb_backup_launcher.core.models import SubmittedJob

from .job_builder import JobBuilder
from .placement_resolver import PlacementResolver
from .replica_selector import ReplicaSelector

logger = logging.getLogger("backup_launcher.launcher_service")


class BackupLauncherService:
    """Single-shot launcher for a zone-pinned MongoDB backup Job.

    Example:
        >>> service = BackupLauncherService.from_settings(get_settings())
        >>> service.run().name
        'targeted-mongodb-backups-x7k2p'
    """

    def __init__(
        self,
        selector: ReplicaSelector,
        resolver: PlacementResolver,
        builder: JobBuilder,
    ) -> None:
        self.selector = selector
        self.resolver = resolver
        self.builder = builder

    @classmethod
    def from_clients(
        cls,
        settings: Settings,
        database_client: ReplicaSetCommandClient,
        cluster_client: ClusterClient,
    ) -> BackupLauncherService:
        """Wire the three stages around already-built clients."""
        return cls(
            selector=ReplicaSelector(database_client, exclude_replica=settings.exclude_replica),
            resolver=PlacementResolver(cluster_client, zone_label=settings.job.zone_label_key),
            builder=JobBuilder(
                cluster_client,
                image=settings.docker_image_uri,
                backup_type=settings.backup_type,
                created_by=settings.hostname,
                job_config=settings.job,
            ),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> BackupLauncherService:
        """Build the real MongoDB and Kubernetes clients and wire the stages.

        Raises:
            ClientInitError: If either client cannot be created.
        """
        try:
            database_client = create_database_client(settings.mongodb)
        except UpstreamError as e:
            raise ClientInitError(str(e)) from e
        try:
            cluster_client = create_cluster_client(settings.kubernetes)
        except UpstreamError as e:
            database_client.close()
            raise ClientInitError(str(e)) from e
        return cls.from_clients(settings, database_client, cluster_client)

    def run(self, timeout: float | None = None) -> SubmittedJob:
        """Select, resolve and submit, in that order.

        Args:
            timeout: Per-call deadline forwarded to every external call.

        Returns:
            Handle of the submitted Job.

        Raises:
            LauncherError: The first stage failure, unchanged.
        """
        target = self.selector.select_target(timeout=timeout)
        logger.info("Selected backup target", extra={"target": target})

        placement = self.resolver.resolve_placement(target, timeout=timeout)
        logger.info(
            "Resolved target placement",
            extra={"zone": placement.zone, "namespace": placement.namespace},
        )

        return self.builder.submit_job(
            target, placement.zone, placement.namespace, timeout=timeout
        )

    def close(self) -> None:
        """Close the MongoDB and Kubernetes clients."""
        try:
            self.selector.database_client.close()
        finally:
            self.resolver.cluster_client.close()
