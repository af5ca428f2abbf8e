from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.nutrition_repository import NutritionRepository
from ...domain.repositories.user_profile_repository import UserProfileRepository
from ...infrastructure.audio.tts_service import TTSService
from ...infrastructure.external.groq_vlm_service import GroqVLMService
from ...infrastructure.external.uploadthing_client import UploadThingStorageClient
from ...infrastructure.notifications.discord_notifier import DiscordNotifier
from ...processing.photo_pipeline import PhotoPipeline
from ...processing.speech_service import SpeechService
from ...processing.worker.dispatcher import TaskDispatcher
from ...processing.worker.handlers import build_audio_handler, build_image_handler
from ...processing.worker.messages import AUDIO_WORKER, IMAGE_WORKER
from ...processing.worker.worker_manager import WorkerManager
from ...session.session_manager import SessionManager

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class ProcessingProvider:
    """Worker pool, dispatch facade, pipelines and the session state machine"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()

        # Worker types are registered here and started in the app lifespan
        worker_manager = WorkerManager(
            task_timeout_seconds=settings.task_timeout_seconds,
            startup_timeout_seconds=settings.worker_startup_timeout_seconds,
        )
        worker_manager.register_worker_type(IMAGE_WORKER, build_image_handler)
        worker_manager.register_worker_type(AUDIO_WORKER, build_audio_handler)
        container.register_singleton(WorkerManager, worker_manager)

        dispatcher = TaskDispatcher(worker_manager)
        container.register_singleton(TaskDispatcher, dispatcher)

        photo_pipeline = PhotoPipeline(
            dispatcher=dispatcher,
            storage=container.get(UploadThingStorageClient),
            vlm=container.get(GroqVLMService),
            nutrition_repository=container.get(NutritionRepository),
            notifier=container.get(DiscordNotifier),
        )
        container.register_singleton(PhotoPipeline, photo_pipeline)

        speech_service = SpeechService(
            dispatcher=dispatcher,
            tts=container.get(TTSService),
            storage=container.get(UploadThingStorageClient),
        )
        container.register_singleton(SpeechService, speech_service)

        container.register_singleton(
            SessionManager,
            SessionManager(
                photo_pipeline=photo_pipeline,
                speech_service=speech_service,
                profile_repository=container.get(UserProfileRepository),
                settings=settings,
            )
        )
