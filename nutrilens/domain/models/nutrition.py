# Standard library imports
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional


NUTRIENT_FIELDS = (
    "calories",
    "fats",
    "protein",
    "carbs",
    "sugar",
    "cholesterol",
    "vitamin_a",
    "vitamin_c",
    "vitamin_d",
    "vitamin_e",
    "vitamin_k",
    "vitamin_b1",
    "vitamin_b2",
    "vitamin_b3",
    "vitamin_b5",
    "vitamin_b6",
    "vitamin_b7",
    "vitamin_b9",
    "vitamin_b12",
    "potassium",
    "calcium",
    "iron",
    "sodium",
)


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


@dataclass
class NutritionAnalysis:
    """
    Estimated nutrition facts for the food visible in a photo.

    Macros and vitamins are in grams, cholesterol and minerals in milligrams.
    Every value is optional: the model returns null for what it cannot estimate.
    """
    calories: Optional[float] = None
    fats: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    sugar: Optional[float] = None
    cholesterol: Optional[float] = None
    vitamin_a: Optional[float] = None
    vitamin_c: Optional[float] = None
    vitamin_d: Optional[float] = None
    vitamin_e: Optional[float] = None
    vitamin_k: Optional[float] = None
    vitamin_b1: Optional[float] = None
    vitamin_b2: Optional[float] = None
    vitamin_b3: Optional[float] = None
    vitamin_b5: Optional[float] = None
    vitamin_b6: Optional[float] = None
    vitamin_b7: Optional[float] = None
    vitamin_b9: Optional[float] = None
    vitamin_b12: Optional[float] = None
    potassium: Optional[float] = None
    calcium: Optional[float] = None
    iron: Optional[float] = None
    sodium: Optional[float] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NutritionAnalysis":
        """Build from model output, ignoring unknown keys and coercing numbers."""
        values: Dict[str, Any] = {name: _to_number(data.get(name)) for name in NUTRIENT_FIELDS}
        description = data.get("description") or data.get("food_description")
        values["description"] = str(description) if description else None
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class NutritionRecord:
    """A persisted analysis, linked to the uploaded image."""
    analysis: NutritionAnalysis
    img_url: str
    user_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[str] = None

    def __post_init__(self) -> None:
        """Business validations"""
        if not self.img_url:
            raise ValueError("Image URL is required")
