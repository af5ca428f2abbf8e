"""
Worker handlers for the "image" and "audio" worker types.

The ``build_*`` factories are registered with the WorkerManager and run on
the worker's own event loop, so every HTTP client here belongs to that loop.
"""
import logging
from typing import Any

import httpx

from ...infrastructure.audio.tts_service import TTSService
from ...infrastructure.external.groq_vlm_service import GroqVLMService
from ...infrastructure.external.uploadthing_client import UploadThingStorageClient
from ...infrastructure.http_client_factory import create_http_client
from . import tasks
from .contracts import WorkerHandler
from .messages import ANSWER_QUESTION, PROCESS_IMAGE, SYNTHESIZE_SPEECH, WorkerMessage

logger = logging.getLogger(__name__)


class ImageTaskHandler(WorkerHandler):
    """Photo upload, nutrition analysis and question answering."""

    message_types = frozenset({PROCESS_IMAGE, ANSWER_QUESTION})

    def __init__(self, storage: UploadThingStorageClient, vlm: GroqVLMService, http_client: httpx.AsyncClient):
        self.storage = storage
        self.vlm = vlm
        self._http_client = http_client

    async def handle(self, message: WorkerMessage) -> Any:
        logger.info(f"Image worker processing {message.type} task {message.id}")
        if message.type == PROCESS_IMAGE:
            return await tasks.process_image(self.storage, self.vlm, message.payload)
        return await tasks.answer_question(self.storage, self.vlm, message.payload)

    async def aclose(self) -> None:
        await self._http_client.aclose()


class AudioTaskHandler(WorkerHandler):
    """Speech synthesis and audio upload."""

    message_types = frozenset({SYNTHESIZE_SPEECH})

    def __init__(self, tts: TTSService, storage: UploadThingStorageClient, http_client: httpx.AsyncClient):
        self.tts = tts
        self.storage = storage
        self._http_client = http_client

    async def handle(self, message: WorkerMessage) -> Any:
        logger.info(f"Audio worker processing {message.type} task {message.id}")
        return await tasks.synthesize_speech(self.tts, self.storage, message.payload)

    async def aclose(self) -> None:
        await self._http_client.aclose()


def build_image_handler() -> ImageTaskHandler:
    client = create_http_client()
    return ImageTaskHandler(UploadThingStorageClient(client), GroqVLMService(client), client)


def build_audio_handler() -> AudioTaskHandler:
    client = create_http_client()
    return AudioTaskHandler(TTSService(client), UploadThingStorageClient(client), client)
