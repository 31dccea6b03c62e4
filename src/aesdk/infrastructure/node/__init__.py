"""Node clients and the node pool."""

from aesdk.infrastructure.node.client import HttpNodeClient, NodeClient
from aesdk.infrastructure.node.pool import NodePool

__all__ = [
    "NodeClient",
    "HttpNodeClient",
    "NodePool",
]
