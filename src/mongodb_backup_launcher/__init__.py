"""Launch zone-pinned Kubernetes Jobs that back up a MongoDB SECONDARY replica."""

__version__ = "0.1.0"
