# Standard library imports
from dataclasses import dataclass
from datetime import datetime


@dataclass
class PhotoData:
    """
    A photo delivered by the glasses camera.

    Cached per user for the viewer endpoints and handed to the photo
    pipeline for upload and analysis.
    """
    request_id: str
    buffer: bytes
    timestamp: datetime
    user_id: str
    mime_type: str = "image/jpeg"
    filename: str = "photo.jpg"

    @property
    def size(self) -> int:
        return len(self.buffer)

    def __post_init__(self) -> None:
        """Business validations"""
        if not self.request_id:
            raise ValueError("Photo request ID is required")
        if not self.buffer:
            raise ValueError("Photo data is empty")


@dataclass
class UploadedFile:
    """Result of a blob storage upload."""
    url: str
    key: str
    size: int
