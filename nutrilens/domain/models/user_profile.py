# Standard library imports
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


DIET_PREFERENCES = (
    "balanced",
    "vegetarian",
    "vegan",
    "keto",
    "paleo",
    "mediterranean",
    "low-carb",
    "low-fat",
)


def wrap_restrictions(restrictions: Optional[str]) -> Optional[str]:
    """Store raw restrictions text as the JSON document the profile table uses."""
    if restrictions is None:
        return None
    return json.dumps({"restrictions": restrictions.strip() or "none"})


def parse_restrictions(diet_restrictions: Optional[str]) -> Optional[str]:
    """Return the plain restrictions text from the stored JSON document."""
    if not diet_restrictions:
        return None
    try:
        parsed = json.loads(diet_restrictions)
    except (TypeError, ValueError):
        return diet_restrictions
    if isinstance(parsed, dict):
        return parsed.get("restrictions")
    return None


@dataclass
class UserDietaryProfile:
    """Pure domain model for a wearer's dietary profile"""
    id: Optional[str]
    username: str
    diet_preference: Optional[str] = None
    diet_restrictions: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Business validations"""
        if not self.username or not self.username.strip():
            raise ValueError("Username is required")
        if self.diet_preference and self.diet_preference not in DIET_PREFERENCES:
            raise ValueError(f"Unsupported diet preference: {self.diet_preference}")

    @property
    def restrictions(self) -> Optional[str]:
        return parse_restrictions(self.diet_restrictions)
