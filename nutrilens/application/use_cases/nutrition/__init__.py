from .list_recent_nutrition import ListRecentNutritionUseCase

__all__ = ["ListRecentNutritionUseCase"]
