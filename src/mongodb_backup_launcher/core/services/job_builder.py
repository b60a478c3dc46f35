"""Service building and submitting the backup Job.

The Job runs the dump image on a node reserved for backups in the same
availability zone as the target replica. It is submitted exactly once;
retries are left to the Job's `backoffLimit` and to whatever schedules the
launcher.
"""

from __future__ import annotations

import logging

from mongodb_backup_launcher.clients.interfaces.cluster import ClusterClient
from mongodb_backup_launcher.config import BackupJobConfig
from mongodb_backup_launcher.core.exceptions import JobSubmissionError, UpstreamError
from mongodb_backup_launcher.core.models import BackupJobSpec, SubmittedJob

logger = logging.getLogger("backup_launcher.job_builder")


class JobBuilder:
    """Builds and submits zone-pinned backup Jobs.

    Example:
        >>> builder = JobBuilder(cluster, image="registry/mongodb-backups:1.4.0",
        ...                      backup_type="daily", created_by="launcher-7d9f")
        >>> job = builder.submit_job(
        ...     "mongodb-2.mongodb.database.svc.cluster.local:27017",
        ...     zone="eu-west-1a",
        ...     namespace="database",
        ... )
        >>> job.name
        'targeted-mongodb-backups-x7k2p'
    """

    def __init__(
        self,
        cluster_client: ClusterClient,
        image: str,
        backup_type: str,
        created_by: str,
        job_config: BackupJobConfig | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            cluster_client: Client used to create the Job.
            image: Container image performing the dump.
            backup_type: Classification label and entrypoint argument.
            created_by: Provenance recorded on the Job.
            job_config: Fixed descriptor shape. Defaults to `BackupJobConfig()`.
        """
        self.cluster_client = cluster_client
        self.image = image
        self.backup_type = backup_type
        self.created_by = created_by
        self.job_config = job_config or BackupJobConfig()

    def build(self, replica_address: str, zone: str, namespace: str) -> BackupJobSpec:
        """Build the Job descriptor without submitting it."""
        return BackupJobSpec(
            namespace=namespace,
            zone=zone,
            replica_address=replica_address,
            image=self.image,
            backup_type=self.backup_type,
            created_by=self.created_by,
            config=self.job_config,
        )

    def submit_job(
        self,
        replica_address: str,
        zone: str,
        namespace: str,
        timeout: float | None = None,
    ) -> SubmittedJob:
        """Build the Job descriptor and submit it once.

        Args:
            replica_address: Replica to dump, passed as MONGO_HOSTLIST.
            zone: Zone the Job is pinned to.
            namespace: Namespace the Job is created in.
            timeout: Deadline for the create call, forwarded unmodified.

        Returns:
            Handle of the created Job.

        Raises:
            JobSubmissionError: If Kubernetes rejects the Job.
        """
        spec = self.build(replica_address, zone, namespace)

        logger.info(
            "Submitting backup Job",
            extra={
                "namespace": namespace,
                "zone": zone,
                "target": replica_address,
                "backup_type": self.backup_type,
            },
        )

        try:
            job = self.cluster_client.create_job(namespace, spec.to_manifest(), timeout=timeout)
        except UpstreamError as e:
            msg = f"creating backup Job in namespace {namespace}: {e}"
            raise JobSubmissionError(msg) from e

        logger.debug("Job created", extra={"job_name": job.name, "namespace": job.namespace})
        return job
