"""Abstract base classes (interfaces) for the launcher's external clients.

This sub-package contains the ABCs that define the capabilities the core
services depend on. Concrete implementations live in the parent `clients`
package.
"""

from .cluster import ClusterClient
from .database import ReplicaSetCommandClient

__all__ = [
    "ClusterClient",
    "ReplicaSetCommandClient",
]
