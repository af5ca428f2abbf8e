"""
WebSocket gateway for glasses relays.

Inbound frames (JSON):
    {"type": "session.start", "session_id": "...", "capabilities": {...}}
    {"type": "button_press", "press_type": "short" | "long"}
    {"type": "transcription", "text": "...", "is_final": true}
    {"type": "photo", "request_id": "...", "data": "<base64>", "mime_type": "...", "filename": "..."}
    {"type": "set_streaming", "enabled": true}
    {"type": "session.stop", "reason": "..."}

Outbound frames: request_photo, show_text, play_audio, error.
"""
# Standard library imports
import asyncio
import logging
import secrets
from typing import Optional

# External package imports
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

# Local application imports
from ...core.config import get_settings
from ...core.exceptions import NutritionLensError, get_user_message
from ...di.container import get_container
from ...session.device import DeviceCapabilities
from ...session.session_manager import SessionManager
from ...session.ws_device_session import WebSocketDeviceSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["device"])


@router.websocket("/ws/device/{user_id}")
async def device_socket(websocket: WebSocket, user_id: str) -> None:
    await websocket.accept()
    session_manager: SessionManager = get_container().get(SessionManager)
    settings = get_settings()

    device: Optional[WebSocketDeviceSession] = None
    session_id: Optional[str] = None
    start_task: Optional[asyncio.Task] = None
    reason = "disconnected"

    try:
        while True:
            frame = await websocket.receive_json()
            if not isinstance(frame, dict):
                await websocket.send_json({"type": "error", "message": "Frames must be JSON objects"})
                continue
            frame_type = frame.get("type")

            if frame_type == "session.start":
                if device is not None:
                    await websocket.send_json({"type": "error", "message": "Session already started"})
                    continue
                device = WebSocketDeviceSession(
                    websocket,
                    user_id,
                    DeviceCapabilities.from_dict(frame.get("capabilities")),
                    photo_timeout_seconds=settings.capture_timeout_seconds,
                )
                session_id = frame.get("session_id") or secrets.token_hex(8)
                # Runs alongside this loop: pre-warming waits for a photo frame
                start_task = asyncio.create_task(session_manager.on_session(device, session_id, user_id))
                logger.info(f"Device connected for user {user_id} (session {session_id})")
                continue

            if frame_type == "session.stop":
                reason = str(frame.get("reason") or "stopped by device")
                break

            if device is None:
                await websocket.send_json({"type": "error", "message": "Send session.start first"})
                continue

            try:
                if frame_type == "set_streaming":
                    await session_manager.set_streaming(user_id, bool(frame.get("enabled")))
                else:
                    device.handle_frame(frame)
            except NutritionLensError as e:
                logger.warning(f"Rejected frame from user {user_id}: {e}")
                await device.send_error(get_user_message(e))

    except WebSocketDisconnect:
        logger.info(f"Device for user {user_id} disconnected")
    except Exception as e:
        reason = "error"
        logger.error(f"Device connection for user {user_id} failed: {e}", exc_info=True)
    finally:
        if device is not None:
            device.close()
        if start_task is not None and not start_task.done():
            start_task.cancel()
        if session_id is not None:
            await session_manager.on_stop(session_id, user_id, reason)
