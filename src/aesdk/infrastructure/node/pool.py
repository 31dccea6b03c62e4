"""Named pool of node clients with a single selected node."""

import asyncio
import logging
from typing import Any, Iterator

from aesdk.core.errors import DuplicateNodeError, NodeNotFoundError
from aesdk.infrastructure.node.client import NodeClient

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "You can't use Node API. Node is not connected or not defined!"


class NodePool:
    """Stores node clients by name and tracks the selected one.

    Names are unique and never removed. The selection is either unset or
    refers to a name present in the pool. Mutations are not synchronized;
    concurrent callers see whichever selection was written last.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, NodeClient] = {}
        self._selected: str | None = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"NodePool(nodes={list(self._nodes)}, selected={self._selected!r})"

    @property
    def selected_name(self) -> str | None:
        """Name of the selected node, if any."""
        return self._selected

    def names(self) -> list[str]:
        """Names of pooled nodes in insertion order."""
        return list(self._nodes)

    def add_node(self, name: str, node: NodeClient, select: bool = False) -> None:
        """Add a node to the pool.

        Args:
            name: Unique node name
            node: Node client instance
            select: Select this node as current

        Raises:
            DuplicateNodeError: If the name is already taken
        """
        if name in self._nodes:
            raise DuplicateNodeError(name)

        self._nodes[name] = node
        logger.debug(f"Added node {name!r} to pool")
        if select or self._selected is None:
            self.select_node(name)

    def select_node(self, name: str) -> None:
        """Select a pooled node as current.

        Raises:
            NodeNotFoundError: If no node with this name is pooled
        """
        if name not in self._nodes:
            raise NodeNotFoundError(f"Node with name {name} not in pool")
        self._selected = name
        logger.debug(f"Selected node {name!r}")

    def get(self, name: str) -> NodeClient:
        """Get a pooled node by name.

        Raises:
            NodeNotFoundError: If no node with this name is pooled
        """
        try:
            return self._nodes[name]
        except KeyError:
            raise NodeNotFoundError(f"Node with name {name} not in pool") from None

    def is_connected(self) -> bool:
        """Check if a node is selected. Does not contact the node."""
        return self._selected is not None

    def get_selected(self) -> NodeClient:
        """Get the selected node.

        Raises:
            NodeNotFoundError: If no node is selected
        """
        if self._selected is None:
            raise NodeNotFoundError(NOT_CONNECTED_MESSAGE)
        return self._nodes[self._selected]

    async def get_selected_info(self) -> dict[str, Any]:
        """Get name and node-reported metadata of the selected node."""
        node = self.get_selected()
        name = self._selected
        return {"name": name, **await node.get_node_info()}

    async def list_all(self) -> list[dict[str, Any]]:
        """Get name and metadata of every pooled node.

        Info queries run concurrently; the first failure propagates.
        """

        async def _info(name: str, node: NodeClient) -> dict[str, Any]:
            return {"name": name, **await node.get_node_info()}

        return list(
            await asyncio.gather(*(_info(name, node) for name, node in self._nodes.items()))
        )
