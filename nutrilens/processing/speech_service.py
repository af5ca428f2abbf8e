"""Text-to-speech for playback on the glasses."""
import logging
import secrets
from typing import Optional

from ..infrastructure.audio.tts_service import TTSService
from ..infrastructure.external.uploadthing_client import UploadThingStorageClient
from .worker import tasks
from .worker.dispatcher import TaskDispatcher
from .worker.messages import AUDIO_WORKER, SYNTHESIZE_SPEECH

logger = logging.getLogger(__name__)


class SpeechService:
    """Synthesizes speech on the audio worker (or in-process) and returns a playable URL."""

    def __init__(self, dispatcher: TaskDispatcher, tts: TTSService, storage: UploadThingStorageClient) -> None:
        self.dispatcher = dispatcher
        self.tts = tts
        self.storage = storage

    async def synthesize(self, text: str, user_id: str, voice: Optional[str] = None) -> str:
        payload = {
            "text": text,
            "user_id": user_id,
            "request_id": secrets.token_hex(8),
            "voice": voice,
        }
        result = await self.dispatcher.dispatch(
            AUDIO_WORKER,
            SYNTHESIZE_SPEECH,
            payload,
            fallback=lambda: tasks.synthesize_speech(self.tts, self.storage, payload),
        )
        logger.info(f"Speech ready for user {user_id}: {result['audio_url']}")
        return result["audio_url"]
