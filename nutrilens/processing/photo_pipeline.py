"""
Photo Pipeline
--------------

Caches the latest photo per user for the viewer endpoints and runs the
processing chain for each capture:

    upload + nutrition analysis (worker or in-process) -> persist -> notify

Persistence and notification always run on the main loop.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from ..domain.models.nutrition import NutritionAnalysis, NutritionRecord
from ..domain.models.photo import PhotoData, UploadedFile
from ..domain.models.user_profile import UserDietaryProfile
from ..domain.repositories.nutrition_repository import NutritionRepository
from ..infrastructure.external.groq_vlm_service import GroqVLMService
from ..infrastructure.external.uploadthing_client import UploadThingStorageClient
from ..infrastructure.notifications.discord_notifier import DiscordNotifier
from .worker import tasks
from .worker.dispatcher import TaskDispatcher
from .worker.messages import ANSWER_QUESTION, IMAGE_WORKER, PROCESS_IMAGE

logger = logging.getLogger(__name__)


@dataclass
class PhotoProcessingResult:
    upload: UploadedFile
    analysis: Optional[NutritionAnalysis]
    persisted: bool


class PhotoPipeline:
    """Photo cache plus the upload/analyze/persist/notify chain."""

    def __init__(
        self,
        dispatcher: TaskDispatcher,
        storage: UploadThingStorageClient,
        vlm: GroqVLMService,
        nutrition_repository: NutritionRepository,
        notifier: DiscordNotifier,
    ) -> None:
        self.dispatcher = dispatcher
        self.storage = storage
        self.vlm = vlm
        self.nutrition_repository = nutrition_repository
        self.notifier = notifier
        self._photos: Dict[str, PhotoData] = {}
        self._latest_photo_timestamp: Dict[str, datetime] = {}

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def cache_photo(self, photo: PhotoData, user_id: str) -> None:
        self._photos[user_id] = photo
        self._latest_photo_timestamp[user_id] = photo.timestamp

    def get_photo(self, user_id: str) -> Optional[PhotoData]:
        return self._photos.get(user_id)

    def get_latest_photo_timestamp(self, user_id: str) -> Optional[datetime]:
        return self._latest_photo_timestamp.get(user_id)

    def has_photo(self, user_id: str) -> bool:
        return user_id in self._photos

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    @staticmethod
    def _photo_payload(photo: PhotoData) -> dict:
        return {
            "image": photo.buffer,
            "filename": photo.filename,
            "mime_type": photo.mime_type,
            "user_id": photo.user_id,
            "request_id": photo.request_id,
        }

    async def process_photo(self, photo: PhotoData) -> PhotoProcessingResult:
        """
        Upload and analyze a photo, then persist and announce the result.

        Upload/analysis failures (after the fallback) propagate. Persistence
        failure is reported in the result; notification failure is logged.
        """
        payload = self._photo_payload(photo)
        result = await self.dispatcher.dispatch(
            IMAGE_WORKER,
            PROCESS_IMAGE,
            payload,
            fallback=lambda: tasks.process_image(self.storage, self.vlm, payload),
        )

        upload = UploadedFile(**result["upload"])
        analysis = tasks.analysis_from_result(result)
        logger.info(f"Photo {photo.request_id} uploaded to {upload.url}")

        persisted = False
        if analysis is not None:
            record = NutritionRecord(analysis=analysis, img_url=upload.url, user_id=photo.user_id)
            persisted = await self.nutrition_repository.insert(record)
            if not persisted:
                logger.warning(f"Nutrition record for photo {photo.request_id} was not saved")
        else:
            logger.warning(f"No nutrition analysis for photo {photo.request_id}")

        await self.notifier.notify(photo, upload, analysis)
        return PhotoProcessingResult(upload=upload, analysis=analysis, persisted=persisted)

    async def answer_question(
        self,
        photo: PhotoData,
        question: str,
        username: str,
        profiles: List[UserDietaryProfile],
    ) -> str:
        """Upload the photo and answer a dietary question about it."""
        payload = self._photo_payload(photo)
        payload.update(
            question=question,
            username=username,
            profiles=[tasks.profile_payload(profile) for profile in profiles],
        )
        result = await self.dispatcher.dispatch(
            IMAGE_WORKER,
            ANSWER_QUESTION,
            payload,
            fallback=lambda: tasks.answer_question(self.storage, self.vlm, payload),
        )
        return result["answer"]
