"""Correlation map turning fire-and-forget messages into awaitable results."""
import logging
from typing import Callable, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


class TaskChannel(Generic[R]):
    """
    Map of task id -> one-shot completion handler.

    Not thread-safe: every call must happen on the thread that owns the
    channel (the event loop thread). Worker threads hand their responses over
    with ``loop.call_soon_threadsafe``.
    """

    def __init__(self, name: str = "tasks") -> None:
        self.name = name
        self._handlers: Dict[str, Callable[[R], None]] = {}

    def register(self, task_id: str, on_complete: Callable[[R], None]) -> None:
        """Store a one-shot handler for task_id."""
        if task_id in self._handlers:
            raise ValueError(f"Task {task_id} is already pending on channel {self.name}")
        self._handlers[task_id] = on_complete

    def resolve(self, task_id: str, response: R) -> bool:
        """
        Invoke the handler for task_id exactly once and forget it.

        Returns:
            True if a handler was invoked, False for unknown or already
            completed ids (dropped).
        """
        handler = self._handlers.pop(task_id, None)
        if handler is None:
            logger.debug(f"[{self.name}] Dropping response for unknown task {task_id}")
            return False
        handler(response)
        return True

    def discard(self, task_id: str) -> bool:
        """Forget task_id without invoking its handler."""
        return self._handlers.pop(task_id, None) is not None

    def is_pending(self, task_id: str) -> bool:
        return task_id in self._handlers

    def pending_ids(self, prefix: Optional[str] = None) -> List[str]:
        if prefix is None:
            return list(self._handlers)
        return [task_id for task_id in self._handlers if task_id.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._handlers)
