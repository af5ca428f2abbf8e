"""
Worker Handler Contract
-----------------------

A worker type is registered with a factory that builds a WorkerHandler.
The factory runs inside the worker thread, on the worker's private event
loop, so any async clients the handler creates are bound to that loop.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, FrozenSet

from .messages import WorkerMessage


class WorkerHandler(ABC):
    """Executes the messages of one task domain, one at a time."""

    #: Message types this handler accepts; anything else is answered with a failure.
    message_types: FrozenSet[str] = frozenset()

    @abstractmethod
    async def handle(self, message: WorkerMessage) -> Any:
        """Process one message and return its result payload."""
        pass

    async def aclose(self) -> None:
        """Release resources owned by the handler (called when the worker stops)."""
        return None


WorkerTarget = Callable[[], WorkerHandler]
