# Local application imports
from ....domain.models.photo import PhotoData
from ....processing.photo_pipeline import PhotoPipeline


class GetPhotoUseCase:
    """Use case for fetching the bytes of a user's cached photo"""

    def __init__(self, photo_pipeline: PhotoPipeline) -> None:
        self.photo_pipeline = photo_pipeline

    def execute(self, user_id: str, request_id: str) -> PhotoData:
        """
        Only the latest photo is cached, so older request ids are not found.

        Raises:
            ValueError: If the photo is not cached
        """
        photo = self.photo_pipeline.get_photo(user_id)
        if photo is None or photo.request_id != request_id:
            raise ValueError("Photo not found")
        return photo
