# Local application imports
from ....processing.photo_pipeline import PhotoPipeline
from ...dto.photo_dto import LatestPhotoResponse


class GetLatestPhotoUseCase:
    """Use case for the viewer's latest-photo polling"""

    def __init__(self, photo_pipeline: PhotoPipeline) -> None:
        self.photo_pipeline = photo_pipeline

    def execute(self, user_id: str) -> LatestPhotoResponse:
        """
        Raises:
            ValueError: If the user has no cached photo
        """
        photo = self.photo_pipeline.get_photo(user_id)
        if photo is None:
            raise ValueError("No photo available")
        return LatestPhotoResponse(
            request_id=photo.request_id,
            timestamp=int(photo.timestamp.timestamp() * 1000),
        )
