from .nutrition import ListRecentNutritionUseCase
from .photo import GetLatestPhotoUseCase, GetPhotoUseCase
from .profile import ListProfilesUseCase, UpsertProfileUseCase
from .session import PlaySpeechUseCase, SetStreamingUseCase

__all__ = [
    "ListRecentNutritionUseCase",
    "GetLatestPhotoUseCase",
    "GetPhotoUseCase",
    "ListProfilesUseCase",
    "UpsertProfileUseCase",
    "PlaySpeechUseCase",
    "SetStreamingUseCase",
]
