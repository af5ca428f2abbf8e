"""
Worker Pool Manager
-------------------

Role:
- Own one background thread ("worker") per registered task domain
  (e.g. "image", "audio")
- Route tasks to workers and correlate responses by task id
- Enforce a per-task timeout
- Force-fail pending tasks when their worker crashes or is terminated

Threading model:
- Each worker runs a private asyncio event loop and drains a FIFO queue,
  one task at a time
- Every callback coming out of a worker thread is marshalled onto the
  owning event loop with call_soon_threadsafe, so the pending-task map is
  only ever touched from that loop
"""
import asyncio
import logging
import queue
import secrets
import threading
import time
from typing import Any, Callable, Dict, Optional, Union

from ...core.exceptions import (
    FatalWorkerError,
    TaskTimeoutError,
    WorkerTaskError,
    WorkerTerminatedError,
    WorkerUnavailableError,
)
from .contracts import WorkerHandler, WorkerTarget
from .messages import WorkerMessage, WorkerResponse
from .task_channel import TaskChannel

logger = logging.getLogger(__name__)

# Sentinel put on a worker queue to ask it to exit
_STOP = object()

TaskOutcome = Union[WorkerResponse, Exception]


class WorkerThread(threading.Thread):
    """One live background execution context bound to a worker type."""

    def __init__(
        self,
        worker_type: str,
        target: WorkerTarget,
        on_response: Callable[[WorkerResponse], None],
        on_error: Callable[["WorkerThread", BaseException], None],
        on_exit: Callable[["WorkerThread", int], None],
    ) -> None:
        super().__init__(daemon=True, name=f"Worker-{worker_type}")
        self.worker_type = worker_type
        self._target = target
        self._on_response = on_response
        self._on_error = on_error
        self._on_exit = on_exit
        self._inbox: "queue.Queue[Any]" = queue.Queue()
        self.ready = threading.Event()
        self.startup_error: Optional[BaseException] = None

    def post(self, message: WorkerMessage) -> None:
        self._inbox.put(message)

    def stop(self) -> None:
        self._inbox.put(_STOP)

    def run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        handler: Optional[WorkerHandler] = None
        exit_code = 0
        try:
            try:
                handler = loop.run_until_complete(self._build_handler())
            except Exception as exc:
                logger.error(f"Failed to start {self.worker_type} worker handler: {exc}", exc_info=True)
                self.startup_error = exc
                exit_code = 1
                return
            finally:
                self.ready.set()

            logger.info(f"{self.worker_type} worker ready")
            while True:
                message = self._inbox.get()
                if message is _STOP:
                    break
                response = loop.run_until_complete(self._process(handler, message))
                self._on_response(response)
        except Exception as exc:
            exit_code = 1
            self._on_error(self, exc)
        finally:
            if handler is not None:
                try:
                    loop.run_until_complete(handler.aclose())
                except Exception as exc:
                    logger.warning(f"Error closing {self.worker_type} worker handler: {exc}")
            loop.close()
            self._on_exit(self, exit_code)

    async def _build_handler(self) -> WorkerHandler:
        return self._target()

    async def _process(self, handler: WorkerHandler, message: Any) -> WorkerResponse:
        if not isinstance(message, WorkerMessage):
            logger.error(f"Invalid message received in {self.worker_type} worker: {message!r}")
            return WorkerResponse.failed(getattr(message, "id", "unknown"), "Invalid worker message")

        if message.type not in handler.message_types:
            logger.warning(f"Unknown message type in {self.worker_type} worker: {message.type}")
            return WorkerResponse.failed(message.id, f"Unknown message type: {message.type}")

        try:
            result = await handler.handle(message)
        except FatalWorkerError:
            raise
        except Exception as exc:
            logger.error(f"{self.worker_type} worker task {message.id} failed: {exc}", exc_info=True)
            return WorkerResponse.failed(message.id, str(exc) or "Worker task failed")
        return WorkerResponse.ok(message.id, result)


class WorkerManager:
    """
    Manages the lifecycle of, and communication with, background workers.

    The system is designed to run with zero workers: initialization failures
    are reported as False and callers fall back to in-process execution.
    """

    def __init__(
        self,
        task_timeout_seconds: float = 30.0,
        startup_timeout_seconds: float = 10.0,
        join_timeout_seconds: float = 2.0,
    ) -> None:
        self.task_timeout_seconds = task_timeout_seconds
        self.startup_timeout_seconds = startup_timeout_seconds
        self.join_timeout_seconds = join_timeout_seconds
        self._targets: Dict[str, WorkerTarget] = {}
        self._workers: Dict[str, WorkerThread] = {}
        self._channel: TaskChannel[TaskOutcome] = TaskChannel("worker-tasks")
        self._timeouts: Dict[str, asyncio.TimerHandle] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # ------------------------------------------------------------------
    # Registration / lifecycle
    # ------------------------------------------------------------------

    def register_worker_type(self, worker_type: str, target: WorkerTarget) -> None:
        """Record the handler factory for a worker type. Does not start anything."""
        # Task ids are attributed to their worker by the "<type>_" prefix
        if not worker_type or "_" in worker_type:
            raise ValueError(f"Invalid worker type {worker_type!r}: must be non-empty without '_'")
        self._targets[worker_type] = target

    async def initialize(self, worker_type: str) -> bool:
        """
        (Re)start the worker for a type.

        Returns:
            True when the worker answered its startup handshake, False otherwise
        """
        target = self._targets.get(worker_type)
        if target is None:
            logger.error(f"Failed to initialize worker {worker_type}: worker type not registered")
            return False

        await self.terminate(worker_type)
        self._loop = asyncio.get_running_loop()

        try:
            worker = WorkerThread(
                worker_type,
                target,
                on_response=lambda response: self._post_to_loop(self._handle_worker_message, response),
                on_error=lambda w, error: self._post_to_loop(self._handle_worker_error, w, error),
                on_exit=lambda w, code: self._post_to_loop(self._handle_worker_exit, w, code),
            )
            worker.start()
            ready = await asyncio.to_thread(worker.ready.wait, self.startup_timeout_seconds)
        except Exception as exc:
            logger.error(f"Failed to initialize worker {worker_type}: {exc}", exc_info=True)
            return False

        if not ready:
            logger.error(
                f"Failed to initialize worker {worker_type}: no handshake after "
                f"{self.startup_timeout_seconds}s"
            )
            worker.stop()
            return False
        if worker.startup_error is not None:
            logger.error(f"Failed to initialize worker {worker_type}: {worker.startup_error}")
            return False

        self._workers[worker_type] = worker
        logger.info(f"Worker {worker_type} initialized successfully")
        return True

    async def terminate(self, worker_type: str) -> None:
        """Stop a worker and immediately fail everything still pending on it."""
        worker = self._workers.pop(worker_type, None)
        if worker is None:
            return

        worker.stop()
        failed = self._fail_pending(
            worker_type,
            lambda: WorkerTerminatedError(f"Worker {worker_type} terminated", worker_type=worker_type),
        )
        if failed:
            logger.warning(f"Failed {failed} pending task(s) on terminated worker {worker_type}")

        try:
            await asyncio.to_thread(worker.join, self.join_timeout_seconds)
        except Exception as exc:
            logger.error(f"Error terminating worker {worker_type}: {exc}", exc_info=True)
            return
        if worker.is_alive():
            logger.warning(f"Worker {worker_type} still finishing its current task after stop")
        logger.info(f"Worker {worker_type} terminated successfully")

    async def terminate_all(self) -> None:
        """Stop every worker; nothing stays pending afterwards."""
        results = await asyncio.gather(
            *(self.terminate(worker_type) for worker_type in list(self._workers)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Error during worker shutdown: {result}")

        for task_id in self._channel.pending_ids():
            self._resolve(task_id, WorkerTerminatedError("Worker pool shut down"))
        logger.info("All workers terminated successfully")

    # ------------------------------------------------------------------
    # Task routing
    # ------------------------------------------------------------------

    async def send(self, worker_type: str, message: WorkerMessage) -> Any:
        """
        Post a task to a worker and wait for its result.

        Raises:
            WorkerUnavailableError: no worker of that type is running
            TaskTimeoutError: no response within task_timeout_seconds
            WorkerTaskError: the worker answered with a failure
            WorkerTerminatedError: the worker crashed or was stopped meanwhile
        """
        worker = self._workers.get(worker_type)
        if worker is None:
            raise WorkerUnavailableError(worker_type)

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        task_id = message.id

        def on_complete(outcome: TaskOutcome) -> None:
            if future.done():
                return
            if isinstance(outcome, Exception):
                future.set_exception(outcome)
            elif outcome.success:
                future.set_result(outcome.result)
            else:
                future.set_exception(
                    WorkerTaskError(outcome.error or "Worker task failed", worker_type=worker_type)
                )

        def on_timeout() -> None:
            self._timeouts.pop(task_id, None)
            if self._channel.discard(task_id) and not future.done():
                future.set_exception(TaskTimeoutError(task_id, self.task_timeout_seconds, worker_type))

        self._channel.register(task_id, on_complete)
        self._timeouts[task_id] = loop.call_later(self.task_timeout_seconds, on_timeout)
        worker.post(message)

        try:
            return await future
        finally:
            # Caller cancellation leaves nothing behind
            if self._channel.discard(task_id):
                handle = self._timeouts.pop(task_id, None)
                if handle is not None:
                    handle.cancel()

    def is_worker_available(self, worker_type: str) -> bool:
        return worker_type in self._workers

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        """Per worker type: whether it is active and how many tasks are pending."""
        return {
            worker_type: {
                "active": True,
                "pending_tasks": len(self._channel.pending_ids(f"{worker_type}_")),
            }
            for worker_type in self._workers
        }

    @staticmethod
    def generate_task_id(worker_type: str) -> str:
        """Unique-with-high-probability id; the prefix attributes it to its worker type."""
        return f"{worker_type}_{int(time.time() * 1000)}_{secrets.token_hex(6)}"

    # ------------------------------------------------------------------
    # Worker events (always run on the event loop thread)
    # ------------------------------------------------------------------

    def _post_to_loop(self, callback: Callable[..., None], *args: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Loop shut down between the check and the call
            logger.debug(f"Event loop closed; dropping worker callback {callback.__name__}")

    def _handle_worker_message(self, response: WorkerResponse) -> None:
        self._resolve(response.id, response)

    def _handle_worker_error(self, worker: WorkerThread, error: BaseException) -> None:
        worker_type = worker.worker_type
        logger.error(f"Worker {worker_type} encountered an error: {error}")
        if self._workers.get(worker_type) is not worker:
            return
        del self._workers[worker_type]
        failed = self._fail_pending(
            worker_type,
            lambda: WorkerTerminatedError(f"Worker {worker_type} error: {error}", worker_type=worker_type),
        )
        logger.warning(f"Worker {worker_type} removed after error; failed {failed} pending task(s)")

    def _handle_worker_exit(self, worker: WorkerThread, exit_code: int) -> None:
        if exit_code != 0:
            logger.warning(f"Worker {worker.worker_type} exited with code {exit_code}")
        else:
            logger.debug(f"Worker {worker.worker_type} exited")

    def _resolve(self, task_id: str, outcome: TaskOutcome) -> bool:
        handle = self._timeouts.pop(task_id, None)
        if handle is not None:
            handle.cancel()
        return self._channel.resolve(task_id, outcome)

    def _fail_pending(self, worker_type: str, make_error: Callable[[], Exception]) -> int:
        failed = 0
        for task_id in self._channel.pending_ids(f"{worker_type}_"):
            if self._resolve(task_id, make_error()):
                failed += 1
        return failed
