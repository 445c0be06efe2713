"""
Canvas Graph Model - Core data structures for the node canvas.

This module defines the fundamental building blocks:
- Node: A single workflow step with a kind and a kind-specific payload
- Edge: A directed link feeding one node's output into another's input
- CanvasState: An immutable snapshot of all nodes and edges

Every update function returns a new CanvasState; snapshots are never
mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, NewType, TypeAlias, Union
from uuid import uuid4


# Type aliases for clarity
NodeId = NewType("NodeId", str)
EdgeId = NewType("EdgeId", str)

IMAGE_INPUT_HANDLE = "image-input"
IMAGE_OUTPUT_HANDLE = "image-output"


def new_node_id() -> NodeId:
    """Generate a new unique node ID."""
    return NodeId(str(uuid4()))


def new_edge_id() -> EdgeId:
    """Generate a new unique edge ID."""
    return EdgeId(str(uuid4()))


@dataclass(frozen=True)
class Point2D:
    """2D point for node positioning on the canvas."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point2D) -> Point2D:
        return Point2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point2D) -> Point2D:
        return Point2D(self.x - other.x, self.y - other.y)

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> Point2D:
        return Point2D(self.x + dx, self.y + dy)

    @staticmethod
    def centroid(points: Iterable[Point2D]) -> Point2D:
        """Mean position of the given points."""
        pts = list(points)
        if not pts:
            raise ValueError("centroid of an empty point set")
        return Point2D(
            sum(p.x for p in pts) / len(pts),
            sum(p.y for p in pts) / len(pts),
        )


class NodeKind(Enum):
    """Node type tags. Values match the tags used by the front end."""
    PROMPT_TO_IMAGE = "promptToImage"
    SIMPLE_IMAGE = "simpleImage"
    COMBINE_IMAGE = "combineImage"
    EDIT_IMAGE = "editImage"
    CHAT = "openaiChat"
    GENERATE_VIDEO = "generateVideo"


# --- Payload variants ---

@dataclass(frozen=True)
class PromptToImageData:
    is_loading: bool = False
    prompt: str = ""
    image: str | None = None


@dataclass(frozen=True)
class SimpleImageData:
    """Display node payload. `image` is a data-URL or a remote URL."""
    is_loading: bool = False
    image: str | None = None
    user_uploaded: bool = False


@dataclass(frozen=True)
class CombineImageData:
    is_loading: bool = False
    prompt: str = ""
    image: str | None = None


@dataclass(frozen=True)
class EditImageData:
    is_loading: bool = False
    prompt: str = ""
    image: str | None = None


@dataclass(frozen=True)
class ChatData:
    is_loading: bool = False
    prompt: str = ""
    output_text: str = ""


@dataclass(frozen=True)
class GenerateVideoData:
    is_loading: bool = False
    prompt: str = ""
    video_url: str | None = None


NodeData: TypeAlias = Union[
    PromptToImageData,
    SimpleImageData,
    CombineImageData,
    EditImageData,
    ChatData,
    GenerateVideoData,
]

DATA_TYPES: dict[NodeKind, type] = {
    NodeKind.PROMPT_TO_IMAGE: PromptToImageData,
    NodeKind.SIMPLE_IMAGE: SimpleImageData,
    NodeKind.COMBINE_IMAGE: CombineImageData,
    NodeKind.EDIT_IMAGE: EditImageData,
    NodeKind.CHAT: ChatData,
    NodeKind.GENERATE_VIDEO: GenerateVideoData,
}


@dataclass(frozen=True)
class Node:
    """
    A single node on the canvas.

    Nodes have:
    - A unique ID
    - A kind (references a NodeType in the registry)
    - A position on the canvas
    - A payload whose type is fixed by the kind
    - A selection flag owned by the front end
    """
    id: NodeId
    kind: NodeKind
    position: Point2D = field(default_factory=Point2D)
    data: NodeData = field(default_factory=PromptToImageData)
    selected: bool = False

    def __post_init__(self) -> None:
        expected = DATA_TYPES[self.kind]
        if not isinstance(self.data, expected):
            raise TypeError(
                f"{self.kind.value} node expects {expected.__name__}, "
                f"got {type(self.data).__name__}"
            )

    @classmethod
    def create(
        cls,
        kind: NodeKind,
        position: Point2D | None = None,
        data: NodeData | None = None,
    ) -> Node:
        """Factory method to create a new node with a fresh ID."""
        return cls(
            id=new_node_id(),
            kind=kind,
            position=position or Point2D(),
            data=data if data is not None else DATA_TYPES[kind](),
        )

    @property
    def is_loading(self) -> bool:
        return self.data.is_loading

    @property
    def image(self) -> str | None:
        """Image produced or displayed by this node, if its payload has one."""
        return getattr(self.data, "image", None)

    @property
    def requires_upstream(self) -> bool:
        """True for display nodes that only exist as the result of a connection."""
        return (
            self.kind is NodeKind.SIMPLE_IMAGE
            and not self.data.user_uploaded
        )

    def with_data(self, **fields) -> Node:
        """Return a copy with payload fields shallow-merged."""
        return replace(self, data=replace(self.data, **fields))


@dataclass(frozen=True)
class Edge:
    """
    A directed link between two nodes.

    Declares that the output of `source` feeds the input of `target`.
    """
    id: EdgeId
    source: NodeId
    target: NodeId
    source_handle: str = IMAGE_OUTPUT_HANDLE
    target_handle: str = IMAGE_INPUT_HANDLE
    animated: bool = True
    selected: bool = False

    @classmethod
    def create(cls, source: NodeId, target: NodeId) -> Edge:
        """Factory method to create a new edge."""
        return cls(id=new_edge_id(), source=source, target=target)

    def same_link(self, other: Edge | Connection) -> bool:
        return (
            self.source == other.source
            and self.target == other.target
            and self.source_handle == other.source_handle
            and self.target_handle == other.target_handle
        )


@dataclass(frozen=True)
class Connection:
    """A drag-connect request, before it becomes an edge."""
    source: NodeId
    target: NodeId
    source_handle: str = IMAGE_OUTPUT_HANDLE
    target_handle: str = IMAGE_INPUT_HANDLE


@dataclass(frozen=True)
class CanvasState:
    """
    Immutable snapshot of the canvas.

    Nodes keep insertion order; lookups are linear, which is fine for the
    handful of nodes a canvas holds.
    """
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    def get_node(self, node_id: NodeId) -> Node | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: EdgeId) -> Edge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def inbound_edges(self, node_id: NodeId) -> list[Edge]:
        """Get all edges feeding into a node, in creation order."""
        return [e for e in self.edges if e.target == node_id]

    def outbound_edges(self, node_id: NodeId) -> list[Edge]:
        """Get all edges leaving a node."""
        return [e for e in self.edges if e.source == node_id]

    def upstream_nodes(self, node_id: NodeId) -> list[Node]:
        """Direct upstream nodes, one per inbound edge."""
        result = []
        for edge in self.inbound_edges(node_id):
            source = self.get_node(edge.source)
            if source is not None:
                result.append(source)
        return result

    def selected_nodes(self) -> list[Node]:
        return [n for n in self.nodes if n.selected]

    def __len__(self) -> int:
        """Return the number of nodes."""
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        """Check if a node exists in the snapshot."""
        return any(n.id == node_id for n in self.nodes)


# --- Change records ---

@dataclass(frozen=True)
class NodeAdd:
    node: Node


@dataclass(frozen=True)
class NodeRemove:
    id: NodeId


@dataclass(frozen=True)
class NodePosition:
    id: NodeId
    position: Point2D


@dataclass(frozen=True)
class NodeSelect:
    id: NodeId
    selected: bool


@dataclass(frozen=True)
class NodeDataUpdate:
    id: NodeId
    fields: dict = field(default_factory=dict)


NodeChange: TypeAlias = Union[NodeAdd, NodeRemove, NodePosition, NodeSelect, NodeDataUpdate]


@dataclass(frozen=True)
class EdgeAdd:
    edge: Edge


@dataclass(frozen=True)
class EdgeRemove:
    id: EdgeId


@dataclass(frozen=True)
class EdgeSelect:
    id: EdgeId
    selected: bool


EdgeChange: TypeAlias = Union[EdgeAdd, EdgeRemove, EdgeSelect]


# --- Update functions ---

def _replace_node(state: CanvasState, node_id: NodeId, fn: Callable[[Node], Node]) -> CanvasState:
    if node_id not in state:
        return state
    return replace(
        state,
        nodes=tuple(fn(n) if n.id == node_id else n for n in state.nodes),
    )


def apply_node_changes(changes: Iterable[NodeChange], state: CanvasState) -> CanvasState:
    """
    Apply node changes and return the new snapshot.

    Removing a node also removes every edge touching it, then prunes
    display nodes left without their upstream connection.
    """
    removed_any = False
    for change in changes:
        if isinstance(change, NodeAdd):
            state = replace(state, nodes=state.nodes + (change.node,))
        elif isinstance(change, NodeRemove):
            state = remove_elements(state, node_ids=[change.id], prune=False)
            removed_any = True
        elif isinstance(change, NodePosition):
            state = _replace_node(
                state, change.id, lambda n, p=change.position: replace(n, position=p)
            )
        elif isinstance(change, NodeSelect):
            state = _replace_node(
                state, change.id, lambda n, s=change.selected: replace(n, selected=s)
            )
        elif isinstance(change, NodeDataUpdate):
            state = update_node_data(state, change.id, **change.fields)
        else:
            raise TypeError(f"Unknown node change: {change!r}")
    return prune_orphans(state) if removed_any else state


def apply_edge_changes(changes: Iterable[EdgeChange], state: CanvasState) -> CanvasState:
    """Apply edge changes and return the new snapshot."""
    removed_any = False
    for change in changes:
        if isinstance(change, EdgeAdd):
            state = replace(state, edges=state.edges + (change.edge,))
        elif isinstance(change, EdgeRemove):
            state = replace(
                state, edges=tuple(e for e in state.edges if e.id != change.id)
            )
            removed_any = True
        elif isinstance(change, EdgeSelect):
            state = replace(
                state,
                edges=tuple(
                    replace(e, selected=change.selected) if e.id == change.id else e
                    for e in state.edges
                ),
            )
        else:
            raise TypeError(f"Unknown edge change: {change!r}")
    return prune_orphans(state) if removed_any else state


def can_connect(
    connection: Connection,
    state: CanvasState,
    max_inputs: Callable[[Node], int | None] | None = None,
) -> bool:
    """
    Check whether a connection may become an edge.

    Refuses unknown nodes, self-loops, duplicates of an existing edge and,
    when `max_inputs` is given, connections past the target's capacity.
    """
    source = state.get_node(connection.source)
    target = state.get_node(connection.target)
    if source is None or target is None:
        return False
    if connection.source == connection.target:
        return False
    if any(e.same_link(connection) for e in state.edges):
        return False
    if max_inputs is not None:
        capacity = max_inputs(target)
        if capacity is not None and len(state.inbound_edges(target.id)) >= capacity:
            return False
    return True


def add_edge(
    connection: Connection,
    state: CanvasState,
    max_inputs: Callable[[Node], int | None] | None = None,
) -> CanvasState:
    """Turn a connection into an edge. Refused connections return `state` unchanged."""
    if not can_connect(connection, state, max_inputs):
        return state
    edge = Edge(
        id=new_edge_id(),
        source=connection.source,
        target=connection.target,
        source_handle=connection.source_handle,
        target_handle=connection.target_handle,
    )
    return replace(state, edges=state.edges + (edge,))


def update_node_data(state: CanvasState, node_id: NodeId, **fields) -> CanvasState:
    """Shallow-merge payload fields. An unknown node ID is a no-op."""
    return _replace_node(state, node_id, lambda n: n.with_data(**fields))


def remove_elements(
    state: CanvasState,
    node_ids: Iterable[NodeId] = (),
    edge_ids: Iterable[EdgeId] = (),
    prune: bool = True,
) -> CanvasState:
    """
    Remove nodes and edges.

    Edges touching a removed node go with it.
    """
    node_set = set(node_ids)
    edge_set = set(edge_ids)
    state = CanvasState(
        nodes=tuple(n for n in state.nodes if n.id not in node_set),
        edges=tuple(
            e for e in state.edges
            if e.id not in edge_set
            and e.source not in node_set
            and e.target not in node_set
        ),
    )
    return prune_orphans(state) if prune else state


def prune_orphans(state: CanvasState) -> CanvasState:
    """
    Remove display nodes that lost their upstream connection.

    Repeats until stable, since removing a display node drops its outbound
    edges and may orphan display nodes further downstream.
    """
    while True:
        targets = {e.target for e in state.edges}
        orphans = [
            n.id for n in state.nodes
            if n.requires_upstream and n.id not in targets
        ]
        if not orphans:
            return state
        state = remove_elements(state, node_ids=orphans, prune=False)
