"""
Core module - Graph model, node types, execution and the canvas store.

This module provides the fundamental building blocks for AI Image Canvas:
- Graph: Immutable canvas snapshots and the functions that update them
- Data Types: Image sources (data-URLs, remote URLs) and their helpers
- Node Types: Node definitions and registry
- Canvas: The store that owns the current snapshot and runs node actions
"""

from ai_image_canvas.core.graph import (
    CanvasState,
    Connection,
    Edge,
    EdgeId,
    Node,
    NodeId,
    NodeKind,
    Point2D,
    add_edge,
    apply_edge_changes,
    apply_node_changes,
    prune_orphans,
    remove_elements,
    update_node_data,
)

from ai_image_canvas.core.data_types import (
    ImagePart,
    InvalidImageError,
    download_image,
    file_to_image_part,
    resolve_image_part,
    split_data_url,
    to_data_url,
)

from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeExecutor,
    NodeRegistry,
    NodeType,
    register_node,
)

from ai_image_canvas.core.execution import (
    ActionOutcome,
    ActionResult,
    ExecutionContext,
    NodeStatus,
)

from ai_image_canvas.core.canvas import Canvas

from ai_image_canvas.core.config import CanvasSettings, get_settings


__all__ = [
    # graph.py
    "CanvasState",
    "Connection",
    "Edge",
    "EdgeId",
    "Node",
    "NodeId",
    "NodeKind",
    "Point2D",
    "add_edge",
    "apply_edge_changes",
    "apply_node_changes",
    "prune_orphans",
    "remove_elements",
    "update_node_data",
    # data_types.py
    "ImagePart",
    "InvalidImageError",
    "download_image",
    "file_to_image_part",
    "resolve_image_part",
    "split_data_url",
    "to_data_url",
    # node_types.py
    "MissingInputError",
    "NodeCategory",
    "NodeExecutor",
    "NodeRegistry",
    "NodeType",
    "register_node",
    # execution.py
    "ActionOutcome",
    "ActionResult",
    "ExecutionContext",
    "NodeStatus",
    # canvas.py
    "Canvas",
    # config.py
    "CanvasSettings",
    "get_settings",
]
