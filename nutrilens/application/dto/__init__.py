from .nutrition_dto import NutritionRecordResponse
from .photo_dto import LatestPhotoResponse
from .session_dto import (
    SpeechRequest,
    SpeechResponse,
    StreamingRequest,
    StreamingResponse,
    WorkerStats,
    WorkerStatsResponse,
)
from .user_profile_dto import UserProfileResponse, UserProfileUpsertRequest

__all__ = [
    "NutritionRecordResponse",
    "LatestPhotoResponse",
    "SpeechRequest",
    "SpeechResponse",
    "StreamingRequest",
    "StreamingResponse",
    "WorkerStats",
    "WorkerStatsResponse",
    "UserProfileResponse",
    "UserProfileUpsertRequest",
]
