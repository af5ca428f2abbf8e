"""Fallback-aware entry point used by application logic to run worker tasks."""
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from .messages import WorkerMessage
from .worker_manager import WorkerManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fallback = Callable[[], Awaitable[T]]


class TaskDispatcher:
    """
    Route a logical operation to a background worker, or run it in-process.

    Contract:
    - Worker type unavailable: run ``fallback()`` directly and return (or
      raise) whatever it does. No task id is generated and nothing is sent.
    - Otherwise send the task. If sending fails for any reason (timeout,
      worker failure, crash), log a warning and run ``fallback()`` once.
    - If the fallback raises as well, the fallback's error is the one
      surfaced to the caller, chained to the worker failure as its cause.
    """

    def __init__(self, worker_manager: Optional[WorkerManager]) -> None:
        self.worker_manager = worker_manager

    def is_parallel_available(self, worker_type: str) -> bool:
        return self.worker_manager is not None and self.worker_manager.is_worker_available(worker_type)

    async def dispatch(
        self,
        worker_type: str,
        message_type: str,
        payload: Dict[str, Any],
        fallback: Fallback,
    ) -> Any:
        if not self.is_parallel_available(worker_type):
            logger.debug(f"Worker {worker_type} unavailable, running {message_type} in-process")
            return await fallback()

        message = WorkerMessage(
            type=message_type,
            id=self.worker_manager.generate_task_id(worker_type),
            payload=payload,
        )
        try:
            return await self.worker_manager.send(worker_type, message)
        except Exception as worker_error:
            logger.warning(
                f"Parallel {message_type} on worker {worker_type} failed ({worker_error}); "
                f"falling back to in-process execution"
            )
            try:
                return await fallback()
            except Exception as fallback_error:
                raise fallback_error from worker_error
