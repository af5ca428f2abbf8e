"""
Unit tests for WorkerManager: real worker threads with small in-test handlers.
"""
import asyncio
import time

import pytest
import pytest_asyncio

from nutrilens.core.exceptions import (
    FatalWorkerError,
    TaskTimeoutError,
    WorkerTaskError,
    WorkerTerminatedError,
    WorkerUnavailableError,
)
from nutrilens.processing.worker.contracts import WorkerHandler
from nutrilens.processing.worker.messages import WorkerMessage
from nutrilens.processing.worker.worker_manager import WorkerManager


class EchoHandler(WorkerHandler):
    message_types = frozenset({"echo", "fail", "fatal", "slow"})

    def __init__(self, delay: float = 0.3):
        self.delay = delay
        self.closed = False

    async def handle(self, message: WorkerMessage):
        if message.type == "fail":
            raise RuntimeError("boom")
        if message.type == "fatal":
            raise FatalWorkerError("handler lost its model", worker_type="image")
        if message.type == "slow":
            await asyncio.sleep(self.delay)
        return {"echo": message.payload}

    async def aclose(self) -> None:
        self.closed = True


def _message(manager: WorkerManager, worker_type: str, message_type: str = "echo", payload=None) -> WorkerMessage:
    return WorkerMessage(type=message_type, id=manager.generate_task_id(worker_type), payload=payload or {})


@pytest_asyncio.fixture
async def manager():
    manager = WorkerManager(task_timeout_seconds=2.0, startup_timeout_seconds=2.0, join_timeout_seconds=0.05)
    manager.register_worker_type("image", EchoHandler)
    manager.register_worker_type("audio", EchoHandler)
    yield manager
    await manager.terminate_all()


class TestTaskIds:
    def test_ids_are_unique_and_prefixed(self):
        ids = {WorkerManager.generate_task_id("image") for _ in range(100_000)}

        assert len(ids) == 100_000
        assert all(task_id.startswith("image_") for task_id in ids)


class TestRegistration:
    @pytest.mark.parametrize("worker_type", ["image_hd", "", "_"])
    def test_type_names_that_break_task_prefixes_are_rejected(self, worker_type):
        manager = WorkerManager()

        with pytest.raises(ValueError, match="Invalid worker type"):
            manager.register_worker_type(worker_type, EchoHandler)

    @pytest.mark.asyncio
    async def test_similar_type_names_keep_separate_pending_tasks(self):
        manager = WorkerManager(task_timeout_seconds=2.0, startup_timeout_seconds=2.0, join_timeout_seconds=0.05)
        manager.register_worker_type("image", lambda: EchoHandler(delay=0.5))
        manager.register_worker_type("imagehd", lambda: EchoHandler(delay=0.5))
        try:
            assert await manager.initialize("image")
            assert await manager.initialize("imagehd")
            survivor = asyncio.create_task(manager.send("imagehd", _message(manager, "imagehd", "slow")))
            await asyncio.sleep(0.05)

            await manager.terminate("image")

            assert await survivor == {"echo": {}}
        finally:
            await manager.terminate_all()


class TestInitialize:
    @pytest.mark.asyncio
    async def test_unregistered_type_returns_false(self):
        manager = WorkerManager()

        assert await manager.initialize("video") is False
        assert manager.is_worker_available("video") is False

    @pytest.mark.asyncio
    async def test_factory_failure_returns_false(self):
        def broken_factory():
            raise RuntimeError("missing credentials")

        manager = WorkerManager(startup_timeout_seconds=2.0)
        manager.register_worker_type("image", broken_factory)

        assert await manager.initialize("image") is False
        assert manager.is_worker_available("image") is False

    @pytest.mark.asyncio
    async def test_initialize_makes_worker_available(self, manager):
        assert await manager.initialize("image") is True
        assert manager.is_worker_available("image") is True
        assert manager.get_stats() == {"image": {"active": True, "pending_tasks": 0}}


class TestSend:
    @pytest.mark.asyncio
    async def test_send_without_worker_raises_unavailable(self):
        manager = WorkerManager()

        with pytest.raises(WorkerUnavailableError):
            await manager.send("image", _message(manager, "image"))

    @pytest.mark.asyncio
    async def test_send_returns_handler_result(self, manager):
        await manager.initialize("image")

        result = await manager.send("image", _message(manager, "image", payload={"n": 1}))

        assert result == {"echo": {"n": 1}}
        assert manager.get_stats()["image"]["pending_tasks"] == 0

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_task_error(self, manager):
        await manager.initialize("image")

        with pytest.raises(WorkerTaskError, match="boom"):
            await manager.send("image", _message(manager, "image", "fail"))
        # The worker survives an ordinary task failure
        assert manager.is_worker_available("image")

    @pytest.mark.asyncio
    async def test_unknown_message_type_fails(self, manager):
        await manager.initialize("image")

        with pytest.raises(WorkerTaskError, match="Unknown message type"):
            await manager.send("image", _message(manager, "image", "transcode"))

    @pytest.mark.asyncio
    async def test_timeout_fails_task_and_drops_late_response(self):
        manager = WorkerManager(task_timeout_seconds=0.1, join_timeout_seconds=0.05)
        manager.register_worker_type("image", lambda: EchoHandler(delay=0.3))
        await manager.initialize("image")
        try:
            started = time.monotonic()
            with pytest.raises(TaskTimeoutError):
                await manager.send("image", _message(manager, "image", "slow"))
            elapsed = time.monotonic() - started

            assert 0.1 <= elapsed < 0.3
            # Let the late response arrive; it must be dropped quietly
            await asyncio.sleep(0.35)
            assert manager.get_stats()["image"]["pending_tasks"] == 0
            assert await manager.send("image", _message(manager, "image")) == {"echo": {}}
        finally:
            await manager.terminate_all()


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_fatal_error_removes_only_that_worker(self, manager):
        await manager.initialize("image")
        await manager.initialize("audio")

        with pytest.raises(WorkerTerminatedError):
            await manager.send("image", _message(manager, "image", "fatal"))

        assert manager.is_worker_available("image") is False
        assert manager.is_worker_available("audio") is True
        assert await manager.send("audio", _message(manager, "audio")) == {"echo": {}}

    @pytest.mark.asyncio
    async def test_terminate_force_fails_pending_tasks(self, manager):
        await manager.initialize("image")
        task = asyncio.create_task(manager.send("image", _message(manager, "image", "slow")))
        await asyncio.sleep(0.05)
        assert manager.get_stats()["image"]["pending_tasks"] == 1

        started = time.monotonic()
        await manager.terminate("image")

        with pytest.raises(WorkerTerminatedError):
            await task
        assert time.monotonic() - started < 1.0
        assert manager.is_worker_available("image") is False
        assert manager.get_stats() == {}

    @pytest.mark.asyncio
    async def test_terminate_all_stops_every_worker(self, manager):
        await manager.initialize("image")
        await manager.initialize("audio")

        await manager.terminate_all()

        assert manager.get_stats() == {}
        with pytest.raises(WorkerUnavailableError):
            await manager.send("audio", _message(manager, "audio"))

    @pytest.mark.asyncio
    async def test_reinitialize_replaces_worker(self, manager):
        await manager.initialize("image")
        assert await manager.initialize("image") is True

        assert await manager.send("image", _message(manager, "image")) == {"echo": {}}
