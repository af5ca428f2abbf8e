"""
Unit tests for the DI container wiring (database and HTTP client patched out).
"""
from unittest.mock import MagicMock, patch

import httpx
import pytest

from nutrilens.application.use_cases.photo import GetLatestPhotoUseCase
from nutrilens.di.base_container import BaseContainer
from nutrilens.di.container import DIContainer
from nutrilens.processing.photo_pipeline import PhotoPipeline
from nutrilens.processing.worker.dispatcher import TaskDispatcher
from nutrilens.processing.worker.messages import AUDIO_WORKER, IMAGE_WORKER
from nutrilens.processing.worker.worker_manager import WorkerManager
from nutrilens.session.session_manager import SessionManager


@pytest.fixture
def container():
    with patch("nutrilens.di.providers.database_provider.get_database", return_value=MagicMock()), patch(
        "nutrilens.di.providers.database_provider.get_nutrition_collection", return_value=MagicMock()
    ), patch(
        "nutrilens.di.providers.database_provider.get_user_profile_collection", return_value=MagicMock()
    ), patch(
        "nutrilens.di.providers.external_service_provider.get_shared_http_client",
        return_value=MagicMock(spec=httpx.AsyncClient),
    ):
        yield DIContainer()


class TestDIContainer:
    def test_core_components_are_singletons(self, container):
        session_manager = container.get(SessionManager)

        assert container.get(SessionManager) is session_manager
        assert session_manager.photo_pipeline is container.get(PhotoPipeline)
        assert container.get(PhotoPipeline).dispatcher is container.get(TaskDispatcher)
        assert container.get(TaskDispatcher).worker_manager is container.get(WorkerManager)

    def test_worker_types_registered_but_not_started(self, container):
        worker_manager = container.get(WorkerManager)

        assert worker_manager.get_stats() == {}
        assert not worker_manager.is_worker_available(IMAGE_WORKER)
        assert not worker_manager.is_worker_available(AUDIO_WORKER)

    def test_use_cases_are_built_per_request(self, container):
        first = container.get(GetLatestPhotoUseCase)

        assert first is not container.get(GetLatestPhotoUseCase)
        assert first.photo_pipeline is container.get(PhotoPipeline)


class TestBaseContainer:
    def test_unregistered_dependency_raises(self):
        with pytest.raises(ValueError, match="Dependency not registered"):
            BaseContainer().get("missing")

    def test_factory_and_singleton(self):
        base = BaseContainer()
        base.register_singleton("answer", 42)
        base.register_factory("fresh", lambda: object())

        assert base.get("answer") == 42
        assert base.get("fresh") is not base.get("fresh")
        assert base.is_registered("answer")
