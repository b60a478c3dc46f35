"""MongoDB client for administrative commands.

This module wraps a `pymongo.MongoClient` behind the `ReplicaSetCommandClient`
interface. Only administrative commands are issued, against the `admin`
database.

## Error Classification

- The server answered with `ok: 0`: pymongo raises `OperationFailure`. The
  reply document carried by the exception is returned as-is so the caller
  sees the failed status rather than a transport error.
- Anything else (connection refused, server selection timeout, bad
  credentials, deadline exceeded) raises `UpstreamError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import pymongo
from pymongo.errors import OperationFailure, PyMongoError

from mongodb_backup_launcher.clients.interfaces.database import ReplicaSetCommandClient
from mongodb_backup_launcher.config import MongoDBConfig
from mongodb_backup_launcher.foundation.exceptions import UpstreamError

logger = logging.getLogger("backup_launcher.mongodb")

# Unauthorized, AuthenticationFailed and MaxTimeMSExpired surface as
# OperationFailure too, but they say nothing about the replica set.
_NOT_A_STATUS_CODES = frozenset({13, 18, 50})


class MongoCommandClient(ReplicaSetCommandClient):
    """pymongo-backed administrative command channel.

    Example:
        >>> mongo = MongoCommandClient.from_config(settings.mongodb)
        >>> mongo.run_command({"replSetGetStatus": 1})["ok"]
        1.0
    """

    def __init__(self, database: Any, mongo_client: pymongo.MongoClient | None = None) -> None:
        """Initialize with an existing database handle.

        Args:
            database: `pymongo.database.Database` commands are run against.
            mongo_client: Owning client, closed by `close()` when given.
        """
        self.database = database
        self._mongo_client = mongo_client

    @classmethod
    def from_config(cls, config: MongoDBConfig) -> MongoCommandClient:
        """Create a client from MongoDBConfig.

        pymongo connects lazily, so this only fails on an invalid URI or
        options.

        Raises:
            UpstreamError: If pymongo rejects the connection settings.
        """
        try:
            mongo_client: pymongo.MongoClient = pymongo.MongoClient(
                config.uri,
                username=config.username,
                password=config.password,
                authSource=config.auth_source,
            )
        except PyMongoError as e:
            msg = f"creating MongoDB client: {e}"
            raise UpstreamError(msg) from e
        return cls(mongo_client[config.database], mongo_client=mongo_client)

    def run_command(
        self, command: Mapping[str, Any], timeout: float | None = None
    ) -> Mapping[str, Any]:
        """Run `command` on the admin database.

        Args:
            command: Command document, e.g. `{"replSetGetStatus": 1}`.
            timeout: Deadline in seconds applied with `pymongo.timeout()`.

        Returns:
            The server reply, including replies with `ok: 0`.

        Raises:
            UpstreamError: If the command could not be executed.
        """
        command_name = next(iter(command), "")
        try:
            with pymongo.timeout(timeout):
                return self.database.command(dict(command))
        except OperationFailure as e:
            if e.code in _NOT_A_STATUS_CODES or not e.details:
                msg = f"running command {command_name}: {e}"
                raise UpstreamError(msg) from e
            logger.warning(
                "Command returned a failed status",
                extra={"command": command_name, "code": e.code, "reason": str(e)},
            )
            return e.details
        except PyMongoError as e:
            msg = f"running command {command_name}: {e}"
            raise UpstreamError(msg) from e

    def close(self) -> None:
        if self._mongo_client is not None:
            self._mongo_client.close()
