"""
Unit tests for PhotoPipeline caching and the upload/analyze/persist/notify chain.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from nutrilens.core.exceptions import StorageError
from nutrilens.domain.models.nutrition import NutritionAnalysis
from nutrilens.domain.models.photo import UploadedFile
from nutrilens.domain.models.user_profile import UserDietaryProfile
from nutrilens.processing.photo_pipeline import PhotoPipeline
from nutrilens.processing.worker.dispatcher import TaskDispatcher
from nutrilens.processing.worker.messages import ANSWER_QUESTION, IMAGE_WORKER, PROCESS_IMAGE
from tests.fakes import make_photo

UPLOAD = UploadedFile(url="https://utfs.io/f/abc123", key="abc123", size=6)


def _pipeline(dispatcher=None, analysis=None):
    storage = AsyncMock()
    storage.upload.return_value = UPLOAD
    vlm = AsyncMock()
    vlm.analyze_nutrition.return_value = analysis
    vlm.answer_question.return_value = "Looks like a balanced meal."
    repository = AsyncMock()
    repository.insert.return_value = True
    notifier = AsyncMock()
    return PhotoPipeline(dispatcher or TaskDispatcher(None), storage, vlm, repository, notifier)


class TestPhotoCache:
    def test_cache_keeps_latest_photo_per_user(self):
        pipeline = _pipeline()
        first, second = make_photo("req-1"), make_photo("req-2")

        pipeline.cache_photo(first, "user-1")
        pipeline.cache_photo(second, "user-1")

        assert pipeline.get_photo("user-1") is second
        assert pipeline.get_latest_photo_timestamp("user-1") == second.timestamp
        assert pipeline.has_photo("user-1")
        assert pipeline.get_photo("user-2") is None


class TestProcessPhoto:
    @pytest.mark.asyncio
    async def test_analysis_is_persisted_and_announced(self):
        analysis = NutritionAnalysis(calories=320.0, description="Avocado toast")
        pipeline = _pipeline(analysis=analysis)
        photo = make_photo()

        result = await pipeline.process_photo(photo)

        assert result.upload == UPLOAD
        assert result.analysis.calories == 320.0
        assert result.persisted is True
        record = pipeline.nutrition_repository.insert.await_args.args[0]
        assert record.img_url == UPLOAD.url
        assert record.user_id == "user-1"
        pipeline.notifier.notify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_analysis_is_not_persisted(self):
        pipeline = _pipeline(analysis=None)

        result = await pipeline.process_photo(make_photo())

        assert result.analysis is None
        assert result.persisted is False
        pipeline.nutrition_repository.insert.assert_not_awaited()
        pipeline.notifier.notify.assert_awaited_once_with(make_photo(), UPLOAD, None)

    @pytest.mark.asyncio
    async def test_upload_failure_propagates(self):
        pipeline = _pipeline()
        pipeline.storage.upload.side_effect = StorageError("quota exceeded")

        with pytest.raises(StorageError):
            await pipeline.process_photo(make_photo())
        pipeline.notifier.notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_worker_result_is_used_when_available(self):
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(
            return_value={
                "upload": {"url": UPLOAD.url, "key": UPLOAD.key, "size": UPLOAD.size},
                "analysis": {"calories": 99.0, "description": "Apple"},
            }
        )
        pipeline = _pipeline(dispatcher=dispatcher)

        result = await pipeline.process_photo(make_photo())

        worker_type, message_type, payload = dispatcher.dispatch.await_args.args
        assert (worker_type, message_type) == (IMAGE_WORKER, PROCESS_IMAGE)
        assert payload["image"] == make_photo().buffer
        assert result.analysis.description == "Apple"
        pipeline.storage.upload.assert_not_awaited()


class TestAnswerQuestion:
    @pytest.mark.asyncio
    async def test_answer_in_process(self):
        pipeline = _pipeline()
        profiles = [UserDietaryProfile(id="1", username="Nathan", diet_preference="vegan")]

        answer = await pipeline.answer_question(make_photo(), "Is this vegan?", "Nathan", profiles)

        assert answer == "Looks like a balanced meal."
        question, image_url, username, sent_profiles = pipeline.vlm.answer_question.await_args.args
        assert question == "Is this vegan?"
        assert image_url == UPLOAD.url
        assert username == "Nathan"
        assert sent_profiles[0].diet_preference == "vegan"

    @pytest.mark.asyncio
    async def test_question_payload_is_serializable(self):
        dispatcher = MagicMock()
        dispatcher.dispatch = AsyncMock(return_value={"answer": "Yes.", "image_url": UPLOAD.url})
        pipeline = _pipeline(dispatcher=dispatcher)
        profiles = [UserDietaryProfile(id="1", username="Nathan", diet_preference="keto")]

        assert await pipeline.answer_question(make_photo(), "Keto?", "Nathan", profiles) == "Yes."

        _, message_type, payload = dispatcher.dispatch.await_args.args
        assert message_type == ANSWER_QUESTION
        assert payload["question"] == "Keto?"
        assert payload["profiles"] == [
            {"username": "Nathan", "diet_preference": "keto", "diet_restrictions": None}
        ]
