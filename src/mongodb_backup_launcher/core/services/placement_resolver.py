"""Service resolving where a MongoDB replica physically runs.

Replica addresses are headless-service DNS names:
`<pod>.<service>.<namespace>.svc.<cluster-domain>[:port]`. The pod name and
namespace come straight from the address; the zone is read from the label on
the node the pod is currently scheduled on. Nothing is cached, since a
failover or node replacement moves the replica.
"""

from __future__ import annotations

import logging

from mongodb_backup_launcher.clients.interfaces.cluster import ClusterClient
from mongodb_backup_launcher.core.exceptions import (
    MalformedAddressError,
    PlacementLookupError,
    ResourceNotFoundError,
    UpstreamError,
    ZoneLabelMissingError,
)
from mongodb_backup_launcher.core.models import Placement

logger = logging.getLogger("backup_launcher.placement_resolver")

ZONE_LABEL = "topology.kubernetes.io/zone"


def split_replica_address(replica_address: str) -> tuple[str, str]:
    """Return `(pod_name, namespace)` for a headless-service replica address.

    Raises:
        MalformedAddressError: If the address has fewer than 3 dot-separated
            parts or an empty pod/namespace part.
    """
    host = replica_address.partition(":")[0]
    parts = host.split(".")
    if len(parts) < 3:
        msg = (
            f"replica host name {replica_address!r} must be a K8s headless service "
            "name with at least 3 domain parts"
        )
        raise MalformedAddressError(msg)

    pod_name, namespace = parts[0], parts[2]
    if not pod_name or not namespace:
        msg = f"replica host name {replica_address!r} has an empty pod or namespace part"
        raise MalformedAddressError(msg)
    return pod_name, namespace


class PlacementResolver:
    """Maps a replica address to its availability zone and namespace."""

    def __init__(self, cluster_client: ClusterClient, zone_label: str = ZONE_LABEL) -> None:
        self.cluster_client = cluster_client
        self.zone_label = zone_label

    def resolve_placement(self, replica_address: str, timeout: float | None = None) -> Placement:
        """Find the zone and namespace of the replica at `replica_address`.

        Args:
            replica_address: Member address chosen by the replica selector.
            timeout: Deadline for each API call, forwarded unmodified.

        Returns:
            Placement with the node's zone and the pod's namespace.

        Raises:
            MalformedAddressError: Before any API call, if the address is malformed.
            PlacementLookupError: If the pod or node cannot be read.
            ZoneLabelMissingError: If the node has no zone label.
        """
        pod_name, namespace = split_replica_address(replica_address)
        logger.debug("Finding pod in namespace", extra={"pod": pod_name, "namespace": namespace})

        try:
            pod = self.cluster_client.get_pod(namespace, pod_name, timeout=timeout)
        except ResourceNotFoundError as e:
            msg = (
                f"unable to find pod {pod_name} in namespace {namespace} "
                f"based on hostname {replica_address}: {e}"
            )
            raise PlacementLookupError(msg, resource="pod", not_found=True) from e
        except UpstreamError as e:
            msg = f"finding pod {pod_name} in namespace {namespace}: {e}"
            raise PlacementLookupError(msg, resource="pod", not_found=False) from e

        node_name = pod.node_name
        if not node_name:
            msg = f"pod {pod_name} in namespace {namespace} is not scheduled on a node"
            raise PlacementLookupError(msg, resource="node", not_found=True)

        try:
            node = self.cluster_client.get_node(node_name, timeout=timeout)
        except ResourceNotFoundError as e:
            msg = f"unable to find node {node_name}: {e}"
            raise PlacementLookupError(msg, resource="node", not_found=True) from e
        except UpstreamError as e:
            msg = f"finding node {node_name}: {e}"
            raise PlacementLookupError(msg, resource="node", not_found=False) from e

        zone = node.labels.get(self.zone_label)
        if not zone:
            msg = f"unable to find AZ well known label '{self.zone_label}' on node {node_name}"
            raise ZoneLabelMissingError(msg)

        logger.debug("Target placement", extra={"zone": zone, "namespace": namespace})
        return Placement(zone=zone, namespace=namespace)
