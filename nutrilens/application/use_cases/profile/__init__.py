from .list_profiles import ListProfilesUseCase
from .upsert_profile import UpsertProfileUseCase

__all__ = ["ListProfilesUseCase", "UpsertProfileUseCase"]
