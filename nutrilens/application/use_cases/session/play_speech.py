# Local application imports
from ....session.session_manager import SessionManager
from ...dto.session_dto import SpeechResponse


class PlaySpeechUseCase:
    """Use case for speaking text on the user's glasses"""

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    async def execute(self, user_id: str, text: str) -> SpeechResponse:
        audio_url = await self.session_manager.play_speech(user_id, text)
        return SpeechResponse(audio_url=audio_url)
