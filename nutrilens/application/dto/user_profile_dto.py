from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UserProfileUpsertRequest(BaseModel):
    """DTO for creating or updating a dietary profile"""
    username: str
    diet_preference: Optional[str] = None
    restrictions: Optional[str] = None


class UserProfileResponse(BaseModel):
    """DTO for dietary profile response"""
    id: Optional[str] = None
    username: str
    diet_preference: Optional[str] = None
    diet_restrictions: Optional[str] = None
    parsed_restrictions: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
