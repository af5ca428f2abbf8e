"""
Task bodies shared by the worker handlers and the in-process fallbacks.

Each function takes its collaborators explicitly so the same code runs on a
worker thread (with clients bound to the worker loop) and on the main loop
(with the shared clients). Payloads and results are plain dicts.
"""
import logging
from typing import Any, Dict, Optional

from ...domain.models.nutrition import NutritionAnalysis
from ...domain.models.user_profile import UserDietaryProfile
from ...infrastructure.audio.tts_service import TTSService
from ...infrastructure.external.groq_vlm_service import GroqVLMService
from ...infrastructure.external.uploadthing_client import UploadThingStorageClient

logger = logging.getLogger(__name__)


def _upload_summary(upload) -> Dict[str, Any]:
    return {"url": upload.url, "key": upload.key, "size": upload.size}


async def process_image(
    storage: UploadThingStorageClient,
    vlm: GroqVLMService,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Upload a photo and estimate its nutrition facts.

    Payload: image, filename, mime_type, user_id, request_id.
    Result: {"upload": {...}, "analysis": {...} | None}
    """
    upload = await storage.upload(
        payload["image"],
        payload["filename"],
        payload["mime_type"],
        payload["user_id"],
        payload["request_id"],
    )
    analysis = await vlm.analyze_nutrition(upload.url)
    return {
        "upload": _upload_summary(upload),
        "analysis": analysis.to_dict() if analysis is not None else None,
    }


async def answer_question(
    storage: UploadThingStorageClient,
    vlm: GroqVLMService,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Upload the question photo and answer the question about it.

    Payload: image, filename, mime_type, user_id, request_id, question,
    username, profiles (list of profile dicts).
    Result: {"answer": str, "image_url": str}
    """
    upload = await storage.upload(
        payload["image"],
        payload["filename"],
        payload["mime_type"],
        payload["user_id"],
        payload["request_id"],
    )
    profiles = [UserDietaryProfile(id=None, **profile) for profile in payload.get("profiles", [])]
    answer = await vlm.answer_question(payload["question"], upload.url, payload["username"], profiles)
    return {"answer": answer, "image_url": upload.url}


async def synthesize_speech(
    tts: TTSService,
    storage: UploadThingStorageClient,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Synthesize speech and publish it where the glasses can stream it.

    Payload: text, user_id, request_id, optional voice.
    Result: {"audio_url": str, "size": int}
    """
    audio = await tts.synthesize(payload["text"], voice=payload.get("voice"))
    upload = await storage.upload(
        audio,
        f"tts_{payload['request_id']}.wav",
        "audio/wav",
        payload["user_id"],
        payload["request_id"],
    )
    return {"audio_url": upload.url, "size": upload.size}


def profile_payload(profile: UserDietaryProfile) -> Dict[str, Any]:
    return {
        "username": profile.username,
        "diet_preference": profile.diet_preference,
        "diet_restrictions": profile.diet_restrictions,
    }


def analysis_from_result(result: Dict[str, Any]) -> Optional[NutritionAnalysis]:
    data = result.get("analysis")
    return NutritionAnalysis.from_dict(data) if data else None
