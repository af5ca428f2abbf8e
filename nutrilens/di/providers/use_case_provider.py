from typing import TYPE_CHECKING
from ...application.use_cases.nutrition.list_recent_nutrition import ListRecentNutritionUseCase
from ...application.use_cases.photo.get_latest_photo import GetLatestPhotoUseCase
from ...application.use_cases.photo.get_photo import GetPhotoUseCase
from ...application.use_cases.profile.list_profiles import ListProfilesUseCase
from ...application.use_cases.profile.upsert_profile import UpsertProfileUseCase
from ...application.use_cases.session.play_speech import PlaySpeechUseCase
from ...application.use_cases.session.set_streaming import SetStreamingUseCase
from ...domain.repositories.nutrition_repository import NutritionRepository
from ...domain.repositories.user_profile_repository import UserProfileRepository
from ...processing.photo_pipeline import PhotoPipeline
from ...session.session_manager import SessionManager

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class UseCaseProvider:
    """Use case provider - use cases are created on-demand via factories"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        container.register_factory(
            ListRecentNutritionUseCase,
            lambda: ListRecentNutritionUseCase(
                nutrition_repository=container.get(NutritionRepository)
            )
        )

        container.register_factory(
            ListProfilesUseCase,
            lambda: ListProfilesUseCase(profile_repository=container.get(UserProfileRepository))
        )

        container.register_factory(
            UpsertProfileUseCase,
            lambda: UpsertProfileUseCase(profile_repository=container.get(UserProfileRepository))
        )

        container.register_factory(
            GetLatestPhotoUseCase,
            lambda: GetLatestPhotoUseCase(photo_pipeline=container.get(PhotoPipeline))
        )

        container.register_factory(
            GetPhotoUseCase,
            lambda: GetPhotoUseCase(photo_pipeline=container.get(PhotoPipeline))
        )

        container.register_factory(
            PlaySpeechUseCase,
            lambda: PlaySpeechUseCase(session_manager=container.get(SessionManager))
        )

        container.register_factory(
            SetStreamingUseCase,
            lambda: SetStreamingUseCase(session_manager=container.get(SessionManager))
        )
