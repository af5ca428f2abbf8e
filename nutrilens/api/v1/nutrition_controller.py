# Standard library imports
from typing import List

# External package imports
from fastapi import APIRouter, Depends, HTTPException, Query, status

# Local application imports
from ...application.dto.nutrition_dto import NutritionRecordResponse
from ...application.use_cases.nutrition.list_recent_nutrition import ListRecentNutritionUseCase
from ...di.container import get_container
from .dependencies import get_current_user_id


router = APIRouter(tags=["nutrition"])


@router.get("/recent", response_model=List[NutritionRecordResponse])
async def list_recent_nutrition(
    limit: int = Query(default=10),
    user_id: str = Depends(get_current_user_id),
) -> List[NutritionRecordResponse]:
    """
    Most recent nutrition analyses, newest first

    Args:
        limit: Number of records to return (1..100)
    """
    container = get_container()
    list_recent_use_case = container.get(ListRecentNutritionUseCase)

    try:
        return await list_recent_use_case.execute(limit=limit)
    except ValueError as exception:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exception)
        )
