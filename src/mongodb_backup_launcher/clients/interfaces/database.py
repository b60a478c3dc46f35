"""Database command channel interface.

This module defines the `ReplicaSetCommandClient` ABC, the only capability the
replica selector needs from MongoDB: run one administrative command and get
back its reply document. The pymongo implementation lives in
`clients.mongodb`; tests substitute an offline fake.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from mongodb_backup_launcher.config import MongoDBConfig


class ReplicaSetCommandClient(ABC):
    """Abstract base class for MongoDB administrative command channels.

    Example:
        ```python
        class StaticStatus(ReplicaSetCommandClient):
            def run_command(self, command, timeout=None):
                return {"ok": 1, "members": []}
        ```
    """

    @abstractmethod
    def run_command(
        self, command: Mapping[str, Any], timeout: float | None = None
    ) -> Mapping[str, Any]:
        """Run an administrative command and return the server reply.

        Args:
            command: Command document, e.g. `{"replSetGetStatus": 1}`.
            timeout: Deadline in seconds for this call, forwarded to the
                driver unmodified. None means no deadline.

        Returns:
            The reply document. A reply with `ok: 0` is returned, not raised,
            so the caller can decide what a failed command means.

        Raises:
            UpstreamError: If the command could not be executed at all
                (connection, authentication, timeout).
        """

    def close(self) -> None:  # noqa: B027
        """Close client connections and cleanup resources.

        Note:
            This is not an abstract method because test doubles hold no
            resources. Implementations with connections should override it.
        """
        # Default no-op implementation

    @classmethod
    @abstractmethod
    def from_config(cls, config: MongoDBConfig) -> "ReplicaSetCommandClient":
        """Create a client instance from MongoDBConfig.

        Args:
            config: MongoDB configuration.

        Returns:
            Configured ReplicaSetCommandClient instance.
        """
