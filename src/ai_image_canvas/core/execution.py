"""
Execution - Context and result types for node actions.

Each node action awaits its own remote call on the running event loop.
There is no queue and no concurrency limit: several actions may be in
flight at once via ``asyncio.gather``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, AsyncIterator, Callable, Protocol, Sequence

from ai_image_canvas.core.graph import Node, NodeId

if TYPE_CHECKING:
    from ai_image_canvas.providers.registry import ProviderRegistry


logger = logging.getLogger(__name__)


class NodeStatus(Enum):
    """Lifecycle of a node, derived from its payload's loading flag."""
    IDLE = auto()
    LOADING = auto()

    @classmethod
    def of(cls, node: Node) -> NodeStatus:
        return cls.LOADING if node.is_loading else cls.IDLE


class ActionOutcome(Enum):
    """How a node action ended."""
    SUCCEEDED = auto()
    FAILED = auto()
    BLOCKED = auto()  # Missing input, no remote call made


@dataclass
class ActionResult:
    """Result of running one node action."""
    node_id: NodeId
    outcome: ActionOutcome
    spawned: Node | None = None
    error: str | None = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is ActionOutcome.SUCCEEDED


class ChatTransport(Protocol):
    """Anything that turns a prompt into a stream of reply text."""

    def stream(self, prompt: str) -> AsyncIterator[str]:
        ...


class ExecutionContext:
    """
    Context passed to node executors.

    Provides access to:
    - The provider registry for image and video calls
    - The debug flag (placeholder images instead of API calls)
    - The chat transport used by chat nodes
    - User-facing alerts
    """

    def __init__(
        self,
        providers: ProviderRegistry | None = None,
        debug: bool = False,
        chat_transport: ChatTransport | None = None,
        on_alert: Callable[[str], None] | None = None,
    ):
        self._providers = providers
        self.debug = debug
        self._chat_transport = chat_transport
        self._on_alert = on_alert

    @property
    def providers(self) -> ProviderRegistry:
        if self._providers is None:
            from ai_image_canvas.providers import get_registry
            self._providers = get_registry()
        return self._providers

    @property
    def chat_transport(self) -> ChatTransport:
        """The configured transport, or an in-process one on first use."""
        if self._chat_transport is None:
            from ai_image_canvas.api.transport import DirectChatTransport
            self._chat_transport = DirectChatTransport(self.providers)
        return self._chat_transport

    def alert(self, message: str) -> None:
        """Show a message to the user."""
        if self._on_alert is not None:
            self._on_alert(message)
        else:
            logger.warning("Alert: %s", message)

    async def generate(self, prompt: str, images: Sequence[str] = ()) -> str:
        """Generate one image, honouring the debug flag."""
        from ai_image_canvas.providers.service import generate
        return await generate(prompt, images, debug=self.debug, registry=self.providers)

    async def generate_video(self, prompt: str, image: str) -> str:
        from ai_image_canvas.providers.service import generate_video
        return await generate_video(prompt, image, registry=self.providers)
