"""External service clients for communicating with external systems"""

from .groq_vlm_service import GroqVLMService
from .uploadthing_client import UploadThingStorageClient

__all__ = [
    "GroqVLMService",
    "UploadThingStorageClient",
]
