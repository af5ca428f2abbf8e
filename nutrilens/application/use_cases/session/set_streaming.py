# Local application imports
from ....session.session_manager import SessionManager
from ...dto.session_dto import StreamingResponse


class SetStreamingUseCase:
    """Use case for switching periodic photo capture on or off"""

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    async def execute(self, user_id: str, enabled: bool) -> StreamingResponse:
        streaming = await self.session_manager.set_streaming(user_id, enabled)
        return StreamingResponse(user_id=user_id, streaming=streaming)
