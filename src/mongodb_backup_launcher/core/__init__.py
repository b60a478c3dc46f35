"""Core domain models, services, and shared types for the launcher.

This module provides shared domain code used across all layers:
- Exception hierarchy for error handling and exit codes
- attrs records passed between the pipeline stages

Services live in `core.services` and are imported from there.
"""

from .exceptions import LauncherError
from .models import BackupJobSpec, Member, Placement, ReplicaSetStatus, SubmittedJob

__all__ = [
    "BackupJobSpec",
    "LauncherError",
    "Member",
    "Placement",
    "ReplicaSetStatus",
    "SubmittedJob",
]
