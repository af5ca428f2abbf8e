from pydantic import BaseModel


class LatestPhotoResponse(BaseModel):
    """DTO for the latest cached photo of a user"""
    request_id: str
    timestamp: int  # epoch milliseconds
    has_photo: bool = True
