from typing import TYPE_CHECKING
from ...infrastructure.audio.tts_service import TTSService
from ...infrastructure.external.groq_vlm_service import GroqVLMService
from ...infrastructure.external.uploadthing_client import UploadThingStorageClient
from ...infrastructure.http_client_factory import get_shared_http_client
from ...infrastructure.notifications.discord_notifier import DiscordNotifier

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class ExternalServiceProvider:
    """
    Registers the main-loop clients for blob storage, the vision model,
    speech synthesis and the webhook. They all share one pooled HTTP client.
    Worker threads build their own copies (see processing.worker.handlers).
    """

    @staticmethod
    def register(container: "BaseContainer") -> None:
        http_client = get_shared_http_client()
        container.register_singleton(UploadThingStorageClient, UploadThingStorageClient(http_client))
        container.register_singleton(GroqVLMService, GroqVLMService(http_client))
        container.register_singleton(TTSService, TTSService(http_client))
        container.register_singleton(DiscordNotifier, DiscordNotifier(http_client))
