"""DeviceSession over a WebSocket connection from a glasses relay."""

import asyncio
import base64
import binascii
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Union

from fastapi import WebSocket

from ..core.exceptions import CameraUnavailableError, CaptureTimeoutError, ValidationError
from ..domain.models.photo import PhotoData
from ..processing.worker.task_channel import TaskChannel
from .device import ButtonPress, DeviceCapabilities, DeviceSession, Transcription

logger = logging.getLogger(__name__)

PhotoOutcome = Union[PhotoData, Exception]


def decode_photo_frame(frame: Dict[str, Any], user_id: str) -> PhotoData:
    """Build a PhotoData from an inbound ``photo`` frame."""
    request_id = frame.get("request_id")
    if not request_id:
        raise ValidationError("Photo frame without request_id")
    try:
        buffer = base64.b64decode(frame.get("data") or "", validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Photo {request_id} is not valid base64") from e

    return PhotoData(
        request_id=request_id,
        buffer=buffer,
        timestamp=datetime.now(timezone.utc),
        user_id=user_id,
        mime_type=frame.get("mime_type") or "image/jpeg",
        filename=frame.get("filename") or f"photo_{request_id}.jpg",
    )


class WebSocketDeviceSession(DeviceSession):
    """
    Bridges the device protocol onto a WebSocket.

    Outbound commands are JSON frames. Photo requests are correlated with
    the relay's ``photo`` frames through a TaskChannel keyed by request id.
    """

    def __init__(
        self,
        websocket: WebSocket,
        user_id: str,
        capabilities: DeviceCapabilities,
        photo_timeout_seconds: float = 15.0,
    ) -> None:
        super().__init__(capabilities)
        self.websocket = websocket
        self.user_id = user_id
        self.photo_timeout_seconds = photo_timeout_seconds
        self._photos: TaskChannel[PhotoOutcome] = TaskChannel(f"photos-{user_id}")
        self._closed = False

    async def _send(self, frame: Dict[str, Any]) -> None:
        if self._closed:
            raise CameraUnavailableError(self.user_id)
        await self.websocket.send_json(frame)

    async def request_photo(self) -> PhotoData:
        if not self.capabilities.has_camera:
            raise CameraUnavailableError(self.user_id)

        request_id = secrets.token_hex(8)
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def on_photo(outcome: PhotoOutcome) -> None:
            if future.done():
                return
            if isinstance(outcome, Exception):
                future.set_exception(outcome)
            else:
                future.set_result(outcome)

        self._photos.register(request_id, on_photo)
        try:
            await self._send({"type": "request_photo", "request_id": request_id})
            return await asyncio.wait_for(future, timeout=self.photo_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise CaptureTimeoutError(
                f"Device of user {self.user_id} sent no photo for {request_id} "
                f"within {self.photo_timeout_seconds}s"
            ) from e
        finally:
            self._photos.discard(request_id)

    async def show_text(self, text: str) -> None:
        await self._send({"type": "show_text", "text": text})

    async def play_audio(self, url: str) -> None:
        await self._send({"type": "play_audio", "audio_url": url})

    async def send_error(self, message: str) -> None:
        await self._send({"type": "error", "message": message})

    def handle_frame(self, frame: Dict[str, Any]) -> None:
        """Route one inbound event frame to listeners or to a waiting photo request."""
        frame_type = frame.get("type")
        if frame_type == "button_press":
            self.emit_button_press(ButtonPress(press_type=str(frame.get("press_type", ""))))
        elif frame_type == "transcription":
            self.emit_transcription(
                Transcription(text=str(frame.get("text", "")), is_final=bool(frame.get("is_final", True)))
            )
        elif frame_type == "photo":
            self._handle_photo(frame)
        else:
            raise ValidationError(f"Unknown frame type: {frame_type}")

    def _handle_photo(self, frame: Dict[str, Any]) -> None:
        request_id = frame.get("request_id", "")
        try:
            outcome: PhotoOutcome = decode_photo_frame(frame, self.user_id)
        except ValidationError as e:
            logger.warning(f"Rejected photo from user {self.user_id}: {e}")
            outcome = e
        if not self._photos.resolve(request_id, outcome):
            logger.debug(f"Dropping unrequested photo {request_id} from user {self.user_id}")

    def close(self) -> None:
        """Fail photo requests still waiting on this connection."""
        self._closed = True
        for request_id in self._photos.pending_ids():
            self._photos.resolve(request_id, CameraUnavailableError(self.user_id))
