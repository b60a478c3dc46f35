"""Launcher business logic services.

This module provides the three pipeline stages and the service running them.
"""

from .job_builder import JobBuilder
from .launcher_service import BackupLauncherService
from .placement_resolver import PlacementResolver
from .replica_selector import ReplicaSelector

__all__ = [
    "BackupLauncherService",
    "JobBuilder",
    "PlacementResolver",
    "ReplicaSelector",
]
