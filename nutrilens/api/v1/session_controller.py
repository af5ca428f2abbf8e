# Standard library imports
import logging

# External package imports
from fastapi import APIRouter, Depends, HTTPException, status

# Local application imports
from ...application.dto.session_dto import (
    SpeechRequest,
    SpeechResponse,
    StreamingRequest,
    StreamingResponse,
)
from ...application.use_cases.session.play_speech import PlaySpeechUseCase
from ...application.use_cases.session.set_streaming import SetStreamingUseCase
from ...core.exceptions import (
    NutritionLensError,
    SessionNotFoundError,
    ValidationError,
    get_user_message,
)
from ...di.container import get_container
from .dependencies import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])


def _to_http_error(exception: NutritionLensError) -> HTTPException:
    if isinstance(exception, SessionNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=get_user_message(exception))
    if isinstance(exception, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=get_user_message(exception))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=get_user_message(exception))


@router.post("/tts", response_model=SpeechResponse)
async def play_speech(
    request: SpeechRequest,
    user_id: str = Depends(get_current_user_id),
) -> SpeechResponse:
    """
    Synthesize text and play it on the user's glasses

    Raises:
        HTTPException: 400 for empty text or no speaker, 404 without an
        active session, 502 when synthesis fails
    """
    container = get_container()
    play_speech_use_case = container.get(PlaySpeechUseCase)

    try:
        return await play_speech_use_case.execute(user_id, request.text)
    except NutritionLensError as exception:
        logger.warning(f"TTS request failed for user {user_id}: {exception}")
        raise _to_http_error(exception)


@router.post("/streaming", response_model=StreamingResponse)
async def set_streaming(
    request: StreamingRequest,
    user_id: str = Depends(get_current_user_id),
) -> StreamingResponse:
    container = get_container()
    set_streaming_use_case = container.get(SetStreamingUseCase)

    try:
        return await set_streaming_use_case.execute(user_id, request.enabled)
    except NutritionLensError as exception:
        raise _to_http_error(exception)
