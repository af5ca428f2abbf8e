# External package imports
from fastapi import APIRouter, Depends, HTTPException, Response, status

# Local application imports
from ...application.dto.photo_dto import LatestPhotoResponse
from ...application.use_cases.photo.get_latest_photo import GetLatestPhotoUseCase
from ...application.use_cases.photo.get_photo import GetPhotoUseCase
from ...di.container import get_container
from .dependencies import get_current_user_id


router = APIRouter(tags=["photos"])


@router.get("/latest-photo", response_model=LatestPhotoResponse)
async def get_latest_photo(
    user_id: str = Depends(get_current_user_id),
) -> LatestPhotoResponse:
    """
    Get metadata of the latest photo captured by the user's glasses

    Returns:
        LatestPhotoResponse with request id and capture time (epoch ms)
    """
    container = get_container()
    get_latest_photo_use_case = container.get(GetLatestPhotoUseCase)

    try:
        return get_latest_photo_use_case.execute(user_id)
    except ValueError as exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exception)
        )


@router.get("/photo/{request_id}")
async def get_photo(
    request_id: str,
    user_id: str = Depends(get_current_user_id),
) -> Response:
    """Raw bytes of the user's cached photo"""
    container = get_container()
    get_photo_use_case = container.get(GetPhotoUseCase)

    try:
        photo = get_photo_use_case.execute(user_id, request_id)
    except ValueError as exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exception)
        )

    return Response(
        content=photo.buffer,
        media_type=photo.mime_type,
        headers={"Cache-Control": "no-cache"},
    )
