from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class NutritionRecordResponse(BaseModel):
    """DTO for a stored nutrition analysis"""
    id: Optional[str] = None
    user_id: Optional[str] = None
    img_url: str
    timestamp: datetime
    description: Optional[str] = None
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
