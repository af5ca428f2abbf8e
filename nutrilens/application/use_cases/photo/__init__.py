from .get_latest_photo import GetLatestPhotoUseCase
from .get_photo import GetPhotoUseCase

__all__ = ["GetLatestPhotoUseCase", "GetPhotoUseCase"]
