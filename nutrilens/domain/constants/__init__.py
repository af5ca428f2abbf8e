"""Constants for domain model field names"""

from .nutrition_fields import NutritionFields
from .profile_fields import ProfileFields

__all__ = [
    "NutritionFields",
    "ProfileFields",
]
