"""Service choosing which MongoDB replica to back up.

The launcher never dumps from the PRIMARY. It asks the replica set for its
status and targets the first SECONDARY, in the order the server lists the
members, that is not the configured excluded replica.
"""

from __future__ import annotations

import json
import logging

from mongodb_backup_launcher.clients.interfaces.database import ReplicaSetCommandClient
from mongodb_backup_launcher.core.exceptions import (
    NoEligibleReplicaError,
    StatusNotOKError,
    StatusQueryError,
    UpstreamError,
)
from mongodb_backup_launcher.core.models import ReplicaSetStatus

logger = logging.getLogger("backup_launcher.replica_selector")

REPLICA_SET_STATUS_COMMAND = {"replSetGetStatus": 1}


class ReplicaSelector:
    """Selects the SECONDARY replica a backup should read from.

    Example:
        >>> selector = ReplicaSelector(mongo, exclude_replica="mongodb-1.mongodb.database.svc.cluster.local")
        >>> selector.select_target()
        'mongodb-2.mongodb.database.svc.cluster.local'
    """

    def __init__(self, database_client: ReplicaSetCommandClient, exclude_replica: str = "") -> None:
        """Initialize the selector.

        Args:
            database_client: Channel used to run replSetGetStatus.
            exclude_replica: Member address that must never be chosen. An
                empty string excludes nothing.
        """
        self.database_client = database_client
        self.exclude_replica = exclude_replica

    def get_status(self, timeout: float | None = None) -> ReplicaSetStatus:
        """Run replSetGetStatus and decode the reply.

        Raises:
            StatusQueryError: If the command fails or the reply cannot be decoded.
        """
        try:
            reply = self.database_client.run_command(REPLICA_SET_STATUS_COMMAND, timeout=timeout)
        except UpstreamError as e:
            msg = f"getting replica set status: {e}"
            raise StatusQueryError(msg) from e

        try:
            return ReplicaSetStatus.from_document(reply)
        except (TypeError, ValueError) as e:
            msg = f"decoding replica set status: {e}"
            raise StatusQueryError(msg) from e

    def choose(self, status: ReplicaSetStatus) -> str:
        """Apply the selection policy to a decoded status.

        Args:
            status: Decoded replica set status.

        Returns:
            Address of the first eligible SECONDARY.

        Raises:
            StatusNotOKError: If the status reply is not ok.
            NoEligibleReplicaError: If no SECONDARY survives the exclusion.
        """
        if status.ok != 1:
            msg = f"replica set status command did not complete successfully (ok={status.ok})"
            raise StatusNotOKError(msg)

        for member in status.members:
            if not member.is_secondary:
                continue
            if self.exclude_replica and member.name == self.exclude_replica:
                logger.debug("Skipping excluded replica", extra={"host": member.name})
                continue
            return member.name

        msg = (
            "no SECONDARY replica set member found which is not excluded "
            f"(EXCLUDE_REPLICA = {self.exclude_replica!r})"
        )
        raise NoEligibleReplicaError(msg)

    def select_target(self, timeout: float | None = None) -> str:
        """Query the replica set and return the backup target's address.

        Args:
            timeout: Deadline for the status command, forwarded unmodified.

        Returns:
            Address of the chosen SECONDARY member.

        Raises:
            StatusQueryError: If the status cannot be queried or decoded.
            StatusNotOKError: If the status reply is not ok.
            NoEligibleReplicaError: If no SECONDARY is eligible.
        """
        status = self.get_status(timeout=timeout)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Replica set members:\n%s",
                json.dumps(status.to_dict(), indent=2),
            )

        target = self.choose(status)
        logger.debug("Target host", extra={"host": target})
        return target
