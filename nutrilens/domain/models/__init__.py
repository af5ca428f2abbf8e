from .photo import PhotoData, UploadedFile
from .nutrition import NutritionAnalysis, NutritionRecord
from .user_profile import UserDietaryProfile

__all__ = ["PhotoData", "UploadedFile", "NutritionAnalysis", "NutritionRecord", "UserDietaryProfile"]
