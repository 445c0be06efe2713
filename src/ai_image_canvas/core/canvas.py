"""
Canvas - The store that owns the current graph snapshot.

The canvas holds one CanvasState and replaces it wholesale on every change,
notifying subscribers with the new snapshot. It also runs node actions:
each action validates its inputs, raises the node's loading flag, awaits
its remote call and then either spawns a display node or raises an alert.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable

from ai_image_canvas.core.data_types import (
    InvalidImageError,
    ImagePart,
    download_image,
    file_to_image_part,
    image_part_from_bytes,
    to_data_url,
)
from ai_image_canvas.core.execution import (
    ActionOutcome,
    ActionResult,
    ExecutionContext,
    ChatTransport,
    NodeStatus,
)
from ai_image_canvas.core.graph import (
    CanvasState,
    Connection,
    Edge,
    EdgeAdd,
    EdgeChange,
    EdgeId,
    Node,
    NodeAdd,
    NodeChange,
    NodeId,
    NodeKind,
    NodeSelect,
    Point2D,
    SimpleImageData,
    add_edge,
    apply_edge_changes,
    apply_node_changes,
    remove_elements,
    update_node_data,
)
from ai_image_canvas.core.node_types import MissingInputError, NodeRegistry, NodeType

if TYPE_CHECKING:
    from ai_image_canvas.core.config import CanvasSettings


logger = logging.getLogger(__name__)

SPAWN_OFFSET = 400.0
UPLOAD_AREA = 400.0
LOAD_FAILURE_MESSAGE = "Failed to load image."
STARTER_CHAT_POSITION = Point2D(100, 100)

Listener = Callable[[CanvasState], None]


class Canvas:
    """
    In-memory canvas store.

    Usage:
        canvas = Canvas(ExecutionContext(debug=True, on_alert=print))
        node = canvas.add_node(NodeKind.PROMPT_TO_IMAGE)
        canvas.update_node_data(node.id, prompt="a lighthouse at dusk")
        result = await canvas.run(node.id)
    """

    def __init__(
        self,
        context: ExecutionContext | None = None,
        node_types: NodeRegistry | None = None,
        state: CanvasState | None = None,
        spawn_offset: float = SPAWN_OFFSET,
        rng: random.Random | None = None,
    ):
        self.context = context or ExecutionContext()
        self.spawn_offset = spawn_offset
        if node_types is None:
            node_types = NodeRegistry.instance()
            from ai_image_canvas.nodes import register_missing_nodes
            register_missing_nodes(node_types)
        self._node_types = node_types
        self._state = state if state is not None else CanvasState()
        self._rng = rng or random.Random()
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(
        cls,
        settings: CanvasSettings,
        on_alert: Callable[[str], None] | None = None,
        chat_transport: ChatTransport | None = None,
        seed_chat: bool = True,
    ) -> Canvas:
        """
        Build a canvas whose providers are configured from `settings`.

        A fresh canvas starts with one chat node at (100, 100) unless
        `seed_chat` is False.
        """
        from ai_image_canvas.providers import load_config_from_settings

        context = ExecutionContext(
            providers=load_config_from_settings(settings),
            debug=settings.debug,
            chat_transport=chat_transport,
            on_alert=on_alert,
        )
        canvas = cls(context, spawn_offset=settings.spawn_offset)
        if seed_chat:
            canvas.add_node(NodeKind.CHAT, STARTER_CHAT_POSITION)
        return canvas

    # -------------------------------------------------------------------------
    # State and subscriptions
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CanvasState:
        return self._state

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._state.nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._state.edges

    def get_node(self, node_id: NodeId) -> Node | None:
        return self._state.get_node(node_id)

    def status(self, node_id: NodeId) -> NodeStatus:
        return NodeStatus.of(self._require_node(node_id))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: CanvasState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # -------------------------------------------------------------------------
    # Reconciliation hooks
    # -------------------------------------------------------------------------

    def on_nodes_change(self, changes: Iterable[NodeChange]) -> None:
        self._set_state(apply_node_changes(changes, self._state))

    def on_edges_change(self, changes: Iterable[EdgeChange]) -> None:
        self._set_state(apply_edge_changes(changes, self._state))

    def on_connect(self, connection: Connection) -> bool:
        """Turn a drag-connect into an edge. Returns False if it was refused."""
        new_state = add_edge(connection, self._state, self._node_types.max_inputs)
        if new_state is self._state:
            logger.debug("Refused connection %s -> %s", connection.source, connection.target)
            return False
        self._set_state(new_state)
        return True

    def on_selection_change(self, node_ids: Iterable[NodeId]) -> None:
        selected = set(node_ids)
        changes = [
            NodeSelect(node.id, node.id in selected)
            for node in self._state.nodes
            if node.selected != (node.id in selected)
        ]
        if changes:
            self.on_nodes_change(changes)

    @property
    def toolbar_visible(self) -> bool:
        """True when two or more display nodes, and nothing else, are selected."""
        selected = self._state.selected_nodes()
        return len(selected) >= 2 and all(
            n.kind is NodeKind.SIMPLE_IMAGE for n in selected
        )

    # -------------------------------------------------------------------------
    # Direct mutations
    # -------------------------------------------------------------------------

    def update_node_data(self, node_id: NodeId, **fields) -> None:
        self._set_state(update_node_data(self._state, node_id, **fields))

    def add_nodes(self, *nodes: Node) -> None:
        self.on_nodes_change([NodeAdd(n) for n in nodes])

    def add_edges(self, *edges: Edge) -> None:
        for edge in edges:
            if edge.source not in self._state or edge.target not in self._state:
                raise ValueError(f"Edge {edge.id} references an unknown node")
        self.on_edges_change([EdgeAdd(e) for e in edges])

    def delete_elements(
        self,
        node_ids: Iterable[NodeId] = (),
        edge_ids: Iterable[EdgeId] = (),
    ) -> None:
        """Remove nodes and edges, then drop display nodes left without input."""
        self._set_state(remove_elements(self._state, node_ids, edge_ids))

    def _add_linked(self, node: Node, edges: Iterable[Edge]) -> None:
        # Node and edges land in one snapshot so the node is never orphaned
        state = apply_node_changes([NodeAdd(node)], self._state)
        state = apply_edge_changes([EdgeAdd(e) for e in edges], state)
        self._set_state(state)

    # -------------------------------------------------------------------------
    # Node creation
    # -------------------------------------------------------------------------

    def add_node(self, kind: NodeKind, position: Point2D | None = None) -> Node:
        """Add a fresh node of `kind`, e.g. from the context menu."""
        node = Node.create(kind, position)
        self.add_nodes(node)
        return node

    def import_image(self, path: str | Path) -> Node | None:
        """Add an uploaded image file as a display node."""
        try:
            part = file_to_image_part(path)
        except (InvalidImageError, OSError):
            logger.exception("Failed to import image from %s", path)
            self.context.alert(LOAD_FAILURE_MESSAGE)
            return None
        return self._add_uploaded(part)

    def import_image_bytes(self, raw: bytes, mime_type: str | None = None) -> Node | None:
        """Add uploaded image bytes as a display node."""
        try:
            part = image_part_from_bytes(raw, mime_type)
        except InvalidImageError:
            logger.exception("Failed to import uploaded image")
            self.context.alert(LOAD_FAILURE_MESSAGE)
            return None
        return self._add_uploaded(part)

    def _add_uploaded(self, part: ImagePart) -> Node:
        position = Point2D(
            self._rng.random() * UPLOAD_AREA,
            self._rng.random() * UPLOAD_AREA,
        )
        node = Node.create(
            NodeKind.SIMPLE_IMAGE,
            position,
            SimpleImageData(image=to_data_url(part), user_uploaded=True),
        )
        self.add_nodes(node)
        return node

    def combine_selection(self, node_ids: Iterable[NodeId] | None = None) -> Node | None:
        """
        Wire the selected display nodes into a new combine node.

        The combine node is placed at the centroid of the selection, shifted
        right by the spawn offset. Returns None when the selection is not two
        or more display nodes.
        """
        if node_ids is None:
            sources = self._state.selected_nodes()
        else:
            sources = [n for n in map(self._state.get_node, node_ids) if n is not None]

        if len(sources) < 2 or any(n.kind is not NodeKind.SIMPLE_IMAGE for n in sources):
            logger.info("Combine needs two or more selected image nodes")
            return None

        position = Point2D.centroid(n.position for n in sources).offset(self.spawn_offset)
        combine = Node.create(NodeKind.COMBINE_IMAGE, position)
        self._add_linked(combine, [Edge.create(n.id, combine.id) for n in sources])
        return combine

    def spawn_edit_node(self, node_id: NodeId) -> Node | None:
        """Add an edit node fed by the display node `node_id`."""
        source = self._require_node(node_id)
        if source.kind is not NodeKind.SIMPLE_IMAGE:
            raise ValueError(f"Only image nodes can be edited, got {source.kind.value}")
        edit = Node.create(NodeKind.EDIT_IMAGE, source.position.offset(self.spawn_offset))
        self._add_linked(edit, [Edge.create(source.id, edit.id)])
        return edit

    def _spawn_display_node(self, progenitor: Node, image: str) -> Node:
        display = Node.create(
            NodeKind.SIMPLE_IMAGE,
            progenitor.position.offset(self.spawn_offset),
            SimpleImageData(image=image),
        )
        self._add_linked(display, [Edge.create(progenitor.id, display.id)])
        return display

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def run(self, node_id: NodeId) -> ActionResult:
        """
        Run the action of `node_id` and apply its result.

        Returns:
            ActionResult whose outcome is BLOCKED when inputs were missing
            or the node is already loading (no remote call made), FAILED
            when the call raised, and SUCCEEDED otherwise
        """
        node = self._require_node(node_id)
        node_type = self._node_type(node)
        if node.kind is NodeKind.CHAT:
            return await self.submit_chat(node_id, node.data.prompt)
        if node_type.executor is None:
            raise ValueError(f"{node_type.name} nodes have no action")
        if node.is_loading:
            logger.debug("Node %s is already loading; ignoring the trigger", node_id)
            return ActionResult(node_id, ActionOutcome.BLOCKED)

        inputs = self._collect_inputs(node_id)
        parameters = asdict(node.data)
        try:
            if node_type.check_inputs is not None:
                node_type.check_inputs(inputs, parameters)
        except MissingInputError as e:
            logger.info("%s action blocked on node %s: %s", node_type.name, node_id, e)
            self.context.alert(str(e))
            return ActionResult(node_id, ActionOutcome.BLOCKED, error=str(e))

        prompt = parameters.get("prompt", "")
        self.update_node_data(node_id, is_loading=True)
        started = time.monotonic()
        try:
            output = await node_type.executor(inputs, parameters, self.context)
        except Exception as e:
            logger.exception("%s action failed on node %s", node_type.name, node_id)
            self.update_node_data(node_id, is_loading=False)
            if node_type.failure_message:
                self.context.alert(node_type.failure_message)
            return ActionResult(
                node_id, ActionOutcome.FAILED, error=str(e),
                duration=time.monotonic() - started,
            )

        duration = time.monotonic() - started
        current = self._state.get_node(node_id)
        if current is None:
            logger.warning("Node %s was removed during its call; discarding the result", node_id)
            return ActionResult(
                node_id, ActionOutcome.FAILED,
                error="Node was removed before the result arrived", duration=duration,
            )

        spawned = None
        if node_type.spawns_result:
            self.update_node_data(node_id, is_loading=False, prompt=prompt)
            spawned = self._spawn_display_node(current, output["image"])
        else:
            self.update_node_data(node_id, is_loading=False, prompt=prompt, **output)
        return ActionResult(node_id, ActionOutcome.SUCCEEDED, spawned=spawned, duration=duration)

    async def run_all(self, *node_ids: NodeId) -> list[ActionResult]:
        """Run several actions concurrently."""
        return list(await asyncio.gather(*(self.run(n) for n in node_ids)))

    async def submit_chat(self, node_id: NodeId, text: str) -> ActionResult:
        """
        Send `text` from a chat node and stream the reply into its payload.

        An empty prompt does nothing, and neither does a submit while the
        previous reply is still streaming. Failures are logged, not alerted.
        """
        node = self._require_node(node_id)
        if node.kind is not NodeKind.CHAT:
            raise ValueError(f"Node {node_id} is not a chat node")
        node_type = self._node_type(node)
        if node.is_loading:
            logger.debug("Chat node %s is already streaming; ignoring the submit", node_id)
            return ActionResult(node_id, ActionOutcome.BLOCKED)

        parameters = asdict(node.data) | {"prompt": text}
        try:
            if node_type.check_inputs is not None:
                node_type.check_inputs({}, parameters)
        except MissingInputError:
            return ActionResult(node_id, ActionOutcome.BLOCKED)

        self.update_node_data(node_id, is_loading=True, prompt=text, output_text="")
        started = time.monotonic()

        def on_delta(output_text: str) -> None:
            self.update_node_data(node_id, output_text=output_text)

        try:
            output = await node_type.executor({}, parameters, self.context, on_delta=on_delta)
        except Exception as e:
            logger.exception("Chat failed on node %s", node_id)
            self.update_node_data(node_id, is_loading=False)
            return ActionResult(
                node_id, ActionOutcome.FAILED, error=str(e),
                duration=time.monotonic() - started,
            )

        duration = time.monotonic() - started
        if node_id not in self._state:
            logger.warning("Chat node %s was removed during its call; discarding the reply", node_id)
            return ActionResult(
                node_id, ActionOutcome.FAILED,
                error="Node was removed before the reply finished", duration=duration,
            )
        self.update_node_data(node_id, is_loading=False, **output)
        return ActionResult(node_id, ActionOutcome.SUCCEEDED, duration=duration)

    async def download(self, node_id: NodeId, destination: str | Path) -> bool:
        """Export the image shown by `node_id` to a file."""
        node = self._require_node(node_id)
        if not node.image:
            logger.info("Node %s has no image to download", node_id)
            return False
        return await download_image(node.image, destination)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_node(self, node_id: NodeId) -> Node:
        node = self._state.get_node(node_id)
        if node is None:
            raise KeyError(f"Unknown node: {node_id}")
        return node

    def _node_type(self, node: Node) -> NodeType:
        node_type = self._node_types.get(node.kind)
        if node_type is None:
            raise KeyError(f"No node type registered for {node.kind.value}")
        return node_type

    def _collect_inputs(self, node_id: NodeId) -> dict[str, list[str]]:
        """Image sources of the upstream nodes, in edge order."""
        images = [n.image for n in self._state.upstream_nodes(node_id) if n.image]
        return {"images": images}
