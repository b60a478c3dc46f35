"""Domain models for the backup launcher.

This module defines the structured records passed between the launcher's
stages. Using classes instead of tuples and raw dicts provides:
- Type safety and IDE autocomplete
- Self-documenting code (field names vs. positional indices)
- Value equality, so two descriptors built from the same inputs compare equal

All classes use `attrs` for concise, correct class definitions.
"""

import math
from collections.abc import Mapping
from typing import Any

import attrs

from mongodb_backup_launcher.config import BackupJobConfig

PRIMARY = "PRIMARY"
SECONDARY = "SECONDARY"


@attrs.define(frozen=True, slots=True)
class Member:
    """A replica set member as reported by replSetGetStatus.

    Attributes:
        name: Member address (`host:port`), e.g.
            "mongodb-1.mongodb.database.svc.cluster.local:27017".
        role: The member's `stateStr` (PRIMARY, SECONDARY, ARBITER, ...).
    """

    name: str
    role: str

    @property
    def is_secondary(self) -> bool:
        return self.role == SECONDARY


@attrs.define(frozen=True, slots=True)
class ReplicaSetStatus:
    """Decoded replSetGetStatus reply.

    Attributes:
        ok: Command success flag as sent by the server (1 = success). It is
            kept unrounded so `1.5` is not mistaken for success.
        members: Members in the order the server returned them.
    """

    ok: int | float
    members: tuple[Member, ...] = ()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ReplicaSetStatus":
        """Decode a raw replSetGetStatus reply.

        Only `ok` and each member's `name`/`stateStr` are read; every other
        field of the reply is ignored.

        Args:
            document: Reply document from the database.

        Returns:
            ReplicaSetStatus instance.

        Raises:
            ValueError: If `ok` is missing, not numeric or not finite,
                `members` is not a list, or a member lacks `name` or
                `stateStr`.
        """
        if "ok" not in document:
            raise ValueError("reply has no 'ok' field")
        ok = document["ok"]
        if isinstance(ok, bool) or not isinstance(ok, int | float):
            msg = f"reply 'ok' field is not numeric: {ok!r}"
            raise ValueError(msg)
        if not math.isfinite(ok):
            msg = f"reply 'ok' field is not finite: {ok!r}"
            raise ValueError(msg)

        raw_members = document.get("members", [])
        if not isinstance(raw_members, list | tuple):
            msg = f"reply 'members' field is not a list: {type(raw_members).__name__}"
            raise ValueError(msg)

        members = []
        for index, raw in enumerate(raw_members):
            if not isinstance(raw, Mapping):
                msg = f"member {index} is not a document"
                raise ValueError(msg)
            name = raw.get("name")
            role = raw.get("stateStr")
            if not isinstance(name, str) or not isinstance(role, str):
                msg = f"member {index} is missing 'name' or 'stateStr'"
                raise ValueError(msg)
            members.append(Member(name=name, role=role))

        return cls(ok=ok, members=tuple(members))

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "members": [{"name": m.name, "stateStr": m.role} for m in self.members],
        }


@attrs.define(frozen=True, slots=True)
class Placement:
    """Where a replica runs.

    Attributes:
        zone: Availability zone of the replica's node.
        namespace: Kubernetes namespace of the replica's pod.
    """

    zone: str
    namespace: str


@attrs.define(frozen=True, slots=True)
class PodInfo:
    """The parts of a Kubernetes pod the placement resolver reads.

    Attributes:
        name: Pod name.
        namespace: Pod namespace.
        node_name: Node the pod is scheduled on, None while unscheduled.
    """

    name: str
    namespace: str
    node_name: str | None = None


@attrs.define(frozen=True, slots=True)
class NodeInfo:
    """The parts of a Kubernetes node the placement resolver reads.

    Attributes:
        name: Node name.
        labels: Node metadata labels.
    """

    name: str
    labels: Mapping[str, str] = attrs.field(factory=dict, converter=lambda v: dict(v or {}))


@attrs.define(frozen=True, slots=True)
class SubmittedJob:
    """Handle for a Job accepted by Kubernetes.

    Attributes:
        name: Server-generated Job name.
        namespace: Namespace the Job was created in.
        uid: Job UID, if returned.
    """

    name: str
    namespace: str
    uid: str | None = None


@attrs.define(frozen=True, slots=True)
class BackupJobSpec:
    """Immutable description of one backup Job.

    Built once per run by `JobBuilder.build()`. `to_manifest()` renders a new
    `batch/v1` Job manifest on each call, so the submitted body can never be
    patched after the `BackupJobSpec` is built.

    Attributes:
        namespace: Namespace to create the Job in (the replica's namespace).
        zone: Availability zone the pod is pinned to.
        replica_address: Address of the replica to dump (MONGO_HOSTLIST).
        image: Container image performing the dump.
        backup_type: Classification label and entrypoint argument.
        created_by: Provenance recorded in the `created-by` annotation.
        config: Fixed descriptor shape (service account, pool, resources...).
    """

    namespace: str
    zone: str
    replica_address: str
    image: str
    backup_type: str
    created_by: str
    config: BackupJobConfig

    @property
    def labels(self) -> dict[str, str]:
        return {"backup-type": self.backup_type, "app": self.config.app_label}

    @property
    def command(self) -> list[str]:
        return [self.config.entrypoint, self.backup_type]

    def env(self) -> list[dict[str, Any]]:
        """Container environment: credentials by secret reference, target by value."""
        secret = self.config.credentials_secret
        return [
            {
                "name": "MONGO_INITDB_ROOT_USERNAME",
                "valueFrom": {"secretKeyRef": {"name": secret, "key": "username"}},
            },
            {
                "name": "MONGO_INITDB_ROOT_PASSWORD",
                "valueFrom": {"secretKeyRef": {"name": secret, "key": "password"}},
            },
            {"name": "MONGO_HOSTLIST", "value": self.replica_address},
        ]

    def affinity(self) -> dict[str, Any]:
        """Required node affinity: resolved zone AND reserved node pool."""
        return {
            "nodeAffinity": {
                "requiredDuringSchedulingIgnoredDuringExecution": {
                    "nodeSelectorTerms": [
                        {
                            "matchExpressions": [
                                {
                                    "key": self.config.zone_label_key,
                                    "operator": "In",
                                    "values": [self.zone],
                                },
                                {
                                    "key": self.config.node_pool_label_key,
                                    "operator": "In",
                                    "values": [self.config.node_pool],
                                },
                            ]
                        }
                    ]
                }
            }
        }

    def to_manifest(self) -> dict[str, Any]:
        """Render the `batch/v1` Job manifest.

        Returns:
            A new manifest dictionary, suitable as the body of
            `BatchV1Api.create_namespaced_job`.
        """
        cfg = self.config
        return {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": {
                "generateName": cfg.name_prefix,
                "namespace": self.namespace,
                "annotations": {"created-by": self.created_by},
                "labels": self.labels,
            },
            "spec": {
                "ttlSecondsAfterFinished": cfg.ttl_seconds_after_finished,
                "backoffLimit": cfg.backoff_limit,
                "template": {
                    "metadata": {
                        "annotations": {"karpenter.sh/do-not-disrupt": "true"},
                        "labels": self.labels,
                    },
                    "spec": {
                        "restartPolicy": "Never",
                        "serviceAccountName": cfg.service_account,
                        "tolerations": [
                            {
                                "key": cfg.taint_key,
                                "operator": "Equal",
                                "value": cfg.taint_value,
                                "effect": "NoSchedule",
                            }
                        ],
                        "affinity": self.affinity(),
                        "containers": [
                            {
                                "name": "app",
                                "image": self.image,
                                "command": self.command,
                                "envFrom": [{"configMapRef": {"name": cfg.config_map}}],
                                "env": self.env(),
                                "resources": {
                                    "limits": {"memory": cfg.memory},
                                    "requests": {"memory": cfg.memory, "cpu": cfg.cpu},
                                },
                                "volumeMounts": [
                                    {
                                        "name": cfg.scratch_volume,
                                        "mountPath": cfg.scratch_mount_path,
                                    }
                                ],
                            }
                        ],
                        "volumes": [{"name": cfg.scratch_volume, "emptyDir": {}}],
                    },
                },
            },
        }
