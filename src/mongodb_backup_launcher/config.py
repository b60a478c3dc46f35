"""Configuration management for the MongoDB backup launcher.

This module provides the configuration system for the launcher using Pydantic
models. All settings are loaded from environment variables, with defaults
matching the reference cluster deployment.

## Configuration Sources

Configuration is read from environment variables at process startup. The
`get_settings()` function uses `@lru_cache` to ensure settings are loaded once
per process. The core services never call it: settings are passed to them
explicitly by the CLI.

## Environment Variables

**MongoDB**
- `MONGODB_URI`: Connection string, must start with `mongodb://` (required)
- `MONGODB_USERNAME`: Username, authenticated against `admin` (required)
- `MONGODB_PASSWORD`: Password (required)

**Target selection**
- `EXCLUDE_REPLICA`: A replica address which must never be targeted, e.g.
  one serving analytics traffic (default: empty, nothing excluded)

**Backup Job**
- `DOCKER_IMAGE_URI`: Image that runs the dump (required)
- `BACKUP_TYPE`: Classification label and script argument (default: `daily`)
- `HOSTNAME`: Provenance recorded in the `created-by` annotation
  (default: `socket.gethostname()`)
- `BACKUP_JOB_SERVICE_ACCOUNT` (default: `backups`)
- `BACKUP_JOB_NODE_POOL` (default: `backups`)
- `BACKUP_JOB_TAINT_KEY` (default: `mongodb-backups`)
- `BACKUP_JOB_CONFIG_MAP` (default: `backups`)
- `BACKUP_JOB_SECRET`: Secret holding `username`/`password` (default: `mongodb`)
- `BACKUP_JOB_TTL_SECONDS` (default: `900`)
- `BACKUP_JOB_BACKOFF_LIMIT` (default: `3`)
- `BACKUP_JOB_MEMORY` (default: `1Gi`)
- `BACKUP_JOB_CPU` (default: `2`)

**Kubernetes**
- `RUNNING_LOCALLY`: `true` loads `~/.kube/config`, `false` uses the in-cluster
  service account. If not set, detected via the service account token or
  `KUBERNETES_SERVICE_HOST`.
- `KUBECONFIG`: Kubeconfig path used when running locally (optional)

**Runtime**
- `LOG_LEVEL`: `debug`, `info`, `warn`/`warning` or `error` (default: `info`)
- `REQUEST_TIMEOUT_SECONDS`: Per-call deadline forwarded to MongoDB and
  Kubernetes calls (default: unset, no deadline)

## Usage

```python
from mongodb_backup_launcher.config import get_settings
from mongodb_backup_launcher.core.services import BackupLauncherService

settings = get_settings()
service = BackupLauncherService.from_settings(settings)
job = service.run(timeout=settings.request_timeout)
```
"""

import os
import re
import socket
from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import SettingsConfigDict

# Kubernetes label values: at most 63 chars, alphanumeric at both ends.
_LABEL_VALUE_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")


def _is_running_locally() -> bool:
    """Detect if the launcher runs outside a Kubernetes cluster.

    Checks for:
    1. Explicit RUNNING_LOCALLY=true/false environment variable
    2. Kubernetes service account token (most reliable)
    3. KUBERNETES_SERVICE_HOST environment variable

    Returns:
        True if a local kubeconfig should be used, False for in-cluster config.
    """
    # Check for explicit override
    env_override = os.getenv("RUNNING_LOCALLY")
    if env_override:
        return env_override.strip().lower() == "true"

    if os.path.exists("/var/run/secrets/kubernetes.io/serviceaccount/token"):
        return False

    return not os.getenv("KUBERNETES_SERVICE_HOST")


def _require_env(name: str, description: str) -> str:
    value = os.getenv(name, "")
    if not value:
        msg = f"{description} - {name} - has not been set"
        raise ValueError(msg)
    return value


class MongoDBConfig(BaseModel):
    """Configuration for the MongoDB command channel.

    Attributes:
        uri: MongoDB connection string (`mongodb://...`).
        username: Username used to authenticate.
        password: Password used to authenticate.
        auth_source: Database holding the user's credentials. Default: "admin".
        database: Database the status command is run against. Default: "admin".
    """

    uri: str
    username: str
    password: str = Field(repr=False)
    auth_source: str = "admin"
    database: str = "admin"

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "MongoDBConfig":
        """Create MongoDBConfig from environment variables.

        Raises:
            ValueError: If credentials are missing or the URI is not a
                `mongodb://` connection string.
        """
        username = _require_env("MONGODB_USERNAME", "MongoDB username")
        password = _require_env("MONGODB_PASSWORD", "MongoDB password")
        uri = os.getenv("MONGODB_URI", "")
        if not uri.startswith("mongodb://"):
            msg = "MONGODB_URI must be set and start with 'mongodb://'"
            raise ValueError(msg)
        return cls(uri=uri, username=username, password=password)


class KubernetesConfig(BaseModel):
    """Configuration for the Kubernetes API client.

    Attributes:
        running_locally: Load a kubeconfig file instead of the in-cluster
            service account.
        kubeconfig_path: Explicit kubeconfig path. None means the kubernetes
            library default (`~/.kube/config` or `KUBECONFIG`).
    """

    running_locally: bool = False
    kubeconfig_path: str | None = None

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "KubernetesConfig":
        """Create KubernetesConfig from environment variables."""
        return cls(
            running_locally=_is_running_locally(),
            kubeconfig_path=os.getenv("KUBECONFIG") or None,
        )


class BackupJobConfig(BaseModel):
    """Fixed shape of the backup Job descriptor.

    The defaults match the cluster the launcher was built for: a Karpenter
    node pool named `backups`, tainted `mongodb-backups=true:NoSchedule`, and
    a `backups` service account, config map and `mongodb` credentials secret
    in every database namespace.

    Attributes:
        name_prefix: `generateName` prefix; Kubernetes appends a random suffix.
        app_label: Value of the `app` label on the Job and its pod.
        service_account: Service account the dump pod runs as.
        zone_label_key: Node label holding the availability zone.
        node_pool_label_key: Node label selecting the reserved node pool.
        node_pool: Reserved node pool name.
        taint_key: Key of the taint reserving nodes for backups.
        taint_value: Value of that taint.
        config_map: Config map loaded into the container environment.
        credentials_secret: Secret with `username` and `password` keys.
        entrypoint: Script run by the container.
        memory: Memory request and limit.
        cpu: CPU request. No CPU limit is set.
        scratch_volume: Name of the emptyDir volume.
        scratch_mount_path: Mount path of the emptyDir volume.
        ttl_seconds_after_finished: Job garbage collection delay.
        backoff_limit: Job-level retry bound.
    """

    name_prefix: str = "targeted-mongodb-backups-"
    app_label: str = "mongodb-backups"
    service_account: str = "backups"
    zone_label_key: str = "topology.kubernetes.io/zone"
    node_pool_label_key: str = "karpenter.sh/nodepool"
    node_pool: str = "backups"
    taint_key: str = "mongodb-backups"
    taint_value: str = "true"
    config_map: str = "backups"
    credentials_secret: str = "mongodb"
    entrypoint: str = "/usr/local/bin/mongodump_k8s.sh"
    memory: str = "1Gi"
    cpu: str = "2"
    scratch_volume: str = "instance-storage"
    scratch_mount_path: str = "/backups"
    ttl_seconds_after_finished: int = Field(default=900, ge=0)
    backoff_limit: int = Field(default=3, ge=0)

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "BackupJobConfig":
        """Create BackupJobConfig from `BACKUP_JOB_*` environment variables.

        Unset variables keep the class defaults.
        """
        defaults = cls()
        return cls(
            service_account=os.getenv("BACKUP_JOB_SERVICE_ACCOUNT") or defaults.service_account,
            node_pool=os.getenv("BACKUP_JOB_NODE_POOL") or defaults.node_pool,
            taint_key=os.getenv("BACKUP_JOB_TAINT_KEY") or defaults.taint_key,
            config_map=os.getenv("BACKUP_JOB_CONFIG_MAP") or defaults.config_map,
            credentials_secret=os.getenv("BACKUP_JOB_SECRET") or defaults.credentials_secret,
            memory=os.getenv("BACKUP_JOB_MEMORY") or defaults.memory,
            cpu=os.getenv("BACKUP_JOB_CPU") or defaults.cpu,
            ttl_seconds_after_finished=int(
                os.getenv("BACKUP_JOB_TTL_SECONDS") or defaults.ttl_seconds_after_finished
            ),
            backoff_limit=int(os.getenv("BACKUP_JOB_BACKOFF_LIMIT") or defaults.backoff_limit),
        )


class Settings(BaseModel):
    """Immutable runtime configuration for the launcher.

    All fields are loaded from environment variables via `get_settings()`.
    The class is frozen to prevent accidental mutation after initialization.

    Attributes:
        mongodb: MongoDB connection configuration.
        kubernetes: Kubernetes client configuration.
        job: Backup Job descriptor configuration.
        docker_image_uri: Image that performs the dump.
        exclude_replica: Replica address never used as target ("" = none).
        backup_type: Backup classification label and script argument.
        hostname: Provenance of the launching process.
        log_level: LOG_LEVEL string as given.
        request_timeout: Per-call deadline in seconds, None for no deadline.
    """

    mongodb: MongoDBConfig
    kubernetes: KubernetesConfig
    job: BackupJobConfig
    docker_image_uri: str
    exclude_replica: str = ""
    backup_type: str = "daily"
    hostname: str = ""
    log_level: str = "info"
    request_timeout: float | None = Field(default=None, gt=0)

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables.

        Returns:
            Configured Settings instance.

        Raises:
            ValueError: If a required variable is missing or a value is invalid.
        """
        docker_image_uri = _require_env("DOCKER_IMAGE_URI", "docker image URI")

        backup_type = os.getenv("BACKUP_TYPE") or "daily"
        if len(backup_type) > 63 or not _LABEL_VALUE_RE.match(backup_type):
            msg = f"BACKUP_TYPE '{backup_type}' is not a valid Kubernetes label value"
            raise ValueError(msg)

        timeout_str = os.getenv("REQUEST_TIMEOUT_SECONDS")
        request_timeout = float(timeout_str) if timeout_str else None

        return cls(
            mongodb=MongoDBConfig.from_env(),
            kubernetes=KubernetesConfig.from_env(),
            job=BackupJobConfig.from_env(),
            docker_image_uri=docker_image_uri,
            exclude_replica=os.getenv("EXCLUDE_REPLICA", "").strip(),
            backup_type=backup_type,
            hostname=os.getenv("HOSTNAME") or socket.gethostname(),
            log_level=(os.getenv("LOG_LEVEL") or "info").lower(),
            request_timeout=request_timeout,
        )


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Load and return launcher settings (cached per process).

    Returns:
        A frozen `Settings` instance with all configuration values.

    Note:
        The launcher runs once per process, so caching only matters when the
        CLI and a caller in the same process both ask for settings.
    """
    return Settings.from_env()
