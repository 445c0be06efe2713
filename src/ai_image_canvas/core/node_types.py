"""
Node Types - What each kind of canvas node can do.

Each node kind is described once:
- NodeType: Complete definition of a node type (capacity, payload, executor)
- NodeExecutor: Protocol every node action implements
- NodeRegistry: Lookup from a node's kind tag to its NodeType
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from ai_image_canvas.core.graph import DATA_TYPES, Node, NodeData, NodeKind


class MissingInputError(ValueError):
    """
    Raised by an executor when the node lacks a prompt or an image source.

    The message is shown to the user as-is; no remote call has been made.
    """


class NodeCategory(Enum):
    """Categories for organizing nodes in the context menu."""
    INPUT = "input"
    OUTPUT = "output"
    GENERATION = "generation"
    EDIT = "edit"
    CHAT = "chat"


@runtime_checkable
class NodeExecutor(Protocol):
    """Async action behind a node's submit button."""

    async def __call__(
        self,
        inputs: dict[str, Any],
        parameters: dict[str, Any],
        context: Any,
    ) -> dict[str, Any]:
        """
        Run the action and return payload fields to merge.

        Args:
            inputs: Upstream values; ``inputs["images"]`` lists the image
                sources of the upstream nodes in edge order
            parameters: The node payload as a dict
            context: ExecutionContext with providers, debug flag and alerts

        Returns:
            Payload fields to merge into the node, e.g. ``{"image": url}``
        """
        ...


@dataclass
class NodeType:
    """
    Complete definition of a node type.

    Attributes:
        kind: Tag nodes of this type carry
        name: Display name
        category: Context-menu grouping
        description: Tooltip text
        max_inputs: Inbound edge capacity; None means unbounded
        executor: Async action run by ``Canvas.run``; None for passive nodes
        check_inputs: Raises MissingInputError when the action is blocked;
            called before the loading flag is raised
        spawns_result: Whether a successful run spawns a display node
            holding the returned image
        failure_message: Alert shown when the remote call fails; None
            means failures are only logged
    """
    kind: NodeKind
    name: str
    category: NodeCategory
    description: str = ""

    max_inputs: int | None = 0
    executor: NodeExecutor | None = None
    check_inputs: Callable[[dict[str, Any], dict[str, Any]], None] | None = None
    spawns_result: bool = False
    failure_message: str | None = None

    @property
    def data_factory(self) -> Callable[[], NodeData]:
        """Callable producing the default payload for a new node."""
        return DATA_TYPES[self.kind]

    def capacity(self, node: Node) -> int | None:
        """Inbound edge capacity of `node`. Uploaded images accept nothing."""
        if node.kind is NodeKind.SIMPLE_IMAGE and node.data.user_uploaded:
            return 0
        return self.max_inputs

    def accepts_connection(self, node: Node, inbound_count: int) -> bool:
        """Check whether `node` may take one more inbound edge."""
        capacity = self.capacity(node)
        return capacity is None or inbound_count < capacity


class NodeRegistry:
    """
    Process-wide lookup from NodeKind to NodeType.

    Node modules register themselves with the registry, and the canvas
    looks types up by the kind tag a node carries.
    """

    _instance: NodeRegistry | None = None

    def __new__(cls) -> NodeRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._types = {}
        return cls._instance

    @classmethod
    def instance(cls) -> NodeRegistry:
        """Return the process-wide registry."""
        return cls()

    def __init__(self):
        if not hasattr(self, '_types'):
            self._types: dict[NodeKind, NodeType] = {}

    def register(self, node_type: NodeType) -> None:
        """Add `node_type`, replacing any type with the same kind."""
        self._types[node_type.kind] = node_type

    def unregister(self, kind: NodeKind) -> NodeType | None:
        """Remove and return the type for `kind`, if any."""
        return self._types.pop(kind, None)

    def get(self, kind: NodeKind) -> NodeType | None:
        """Get a node type by kind."""
        return self._types.get(kind)

    def get_all(self) -> list[NodeType]:
        """Every registered node type, in registration order."""
        return list(self._types.values())

    def list_by_category(self, category: NodeCategory) -> list[NodeType]:
        """Node types shown under one context-menu heading."""
        return [t for t in self._types.values() if t.category == category]

    def max_inputs(self, node: Node) -> int | None:
        """Inbound capacity of `node`; unknown kinds accept nothing."""
        node_type = self._types.get(node.kind)
        if node_type is None:
            return 0
        return node_type.capacity(node)

    def clear(self) -> None:
        """Forget every node type."""
        self._types.clear()

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, kind: object) -> bool:
        return kind in self._types


def register_node(node_type: NodeType) -> NodeType:
    """
    Register a node type with the global registry.

    Returns the node type so modules can write
    ``MY_NODE = register_node(NodeType(...))``.
    """
    NodeRegistry.instance().register(node_type)
    return node_type
