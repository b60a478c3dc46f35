"""Exception hierarchy for the backup launcher.

This module defines a framework-agnostic exception hierarchy that allows:
- Service layer code to fail fast with a typed, stage-identifying error
- The CLI to translate each failure kind into its own process exit code
- Tests to assert on the exact failure kind without parsing messages

## Exception Hierarchy

All exceptions inherit from `LauncherError`:

- `ConfigurationError`: Settings are missing or invalid (exit 1)
- `ClientInitError`: MongoDB or Kubernetes client could not be built (exit 2)
- `StatusQueryError`: replSetGetStatus could not be run or decoded (exit 10)
- `StatusNotOKError`: replSetGetStatus replied with ok != 1 (exit 11)
- `NoEligibleReplicaError`: No SECONDARY left after exclusion (exit 12)
- `MalformedAddressError`: Replica address is not a headless-service FQDN (exit 13)
- `PlacementLookupError`: Pod or node lookup failed (exit 14 not found, 15 other)
- `ZoneLabelMissingError`: Node has no topology zone label (exit 16)
- `JobSubmissionError`: Kubernetes rejected the Job (exit 17)

Anything else escaping the launcher exits with `UNEXPECTED_ERROR_EXIT_CODE`.

## Usage

```python
from mongodb_backup_launcher.core.exceptions import LauncherError

try:
    service.run()
except LauncherError as e:
    raise typer.Exit(code=e.exit_code) from e
```
"""

# Re-export collaborator errors so callers only need one import
from mongodb_backup_launcher.foundation.exceptions import (  # noqa: F401
    ResourceNotFoundError,
    UpstreamError,
)

UNEXPECTED_ERROR_EXIT_CODE = 3


class LauncherError(Exception):
    """Base exception class for all launcher errors.

    Attributes:
        stage: Pipeline stage that failed ("config", "clients", "select",
            "resolve", "submit").
        exit_code: Process exit status the CLI uses for this failure.
    """

    stage: str = "launcher"
    exit_code: int = UNEXPECTED_ERROR_EXIT_CODE


class ConfigurationError(LauncherError):
    """Exception raised when settings cannot be loaded from the environment."""

    stage = "config"
    exit_code = 1


class ClientInitError(LauncherError):
    """Exception raised when the MongoDB or Kubernetes client cannot be created."""

    stage = "clients"
    exit_code = 2


class StatusQueryError(LauncherError):
    """Exception raised when the replica set status cannot be queried or decoded.

    Examples:
        - MongoDB is unreachable or authentication fails
        - The reply document has no `ok` field or `members` is not a list
    """

    stage = "select"
    exit_code = 10


class StatusNotOKError(LauncherError):
    """Exception raised when replSetGetStatus answers with `ok` other than 1.

    The replica set is not in a queryable, healthy state (for example the
    server is not running with `--replSet`).
    """

    stage = "select"
    exit_code = 11


class NoEligibleReplicaError(LauncherError):
    """Exception raised when no SECONDARY member is eligible as backup target."""

    stage = "select"
    exit_code = 12


class MalformedAddressError(LauncherError):
    """Exception raised when a replica address does not look like
    `<member>.<service>.<namespace>.<domain-suffix...>`."""

    stage = "resolve"
    exit_code = 13


class PlacementLookupError(LauncherError):
    """Exception raised when the pod or node backing a replica cannot be read.

    Attributes:
        resource: Resource kind that failed ("pod" or "node").
        not_found: True when the API reported the resource as missing, False
            for any other API or transport error.
    """

    stage = "resolve"

    def __init__(self, message: str, *, resource: str, not_found: bool) -> None:
        super().__init__(message)
        self.resource = resource
        self.not_found = not_found

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return 14 if self.not_found else 15


class ZoneLabelMissingError(LauncherError):
    """Exception raised when a node carries no `topology.kubernetes.io/zone` label."""

    stage = "resolve"
    exit_code = 16


class JobSubmissionError(LauncherError):
    """Exception raised when Kubernetes rejects the backup Job.

    Examples:
        - Namespace quota exceeded
        - RBAC forbids creating Jobs in the namespace
        - Manifest validation failure
    """

    stage = "submit"
    exit_code = 17
