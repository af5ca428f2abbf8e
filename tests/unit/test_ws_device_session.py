"""
Unit tests for the WebSocket-backed device session.
"""
import asyncio
import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from nutrilens.core.exceptions import CameraUnavailableError, CaptureTimeoutError, ValidationError
from nutrilens.session.device import DeviceCapabilities
from nutrilens.session.ws_device_session import WebSocketDeviceSession, decode_photo_frame
from tests.fakes import ALL_CAPABILITIES

JPEG = b"\xff\xd8\xff\xe0jpeg"


def _device(capabilities=ALL_CAPABILITIES, timeout=1.0) -> WebSocketDeviceSession:
    websocket = MagicMock()
    websocket.send_json = AsyncMock()
    return WebSocketDeviceSession(websocket, "user-1", capabilities, photo_timeout_seconds=timeout)


def _photo_frame(request_id: str, data: bytes = JPEG) -> dict:
    return {"type": "photo", "request_id": request_id, "data": base64.b64encode(data).decode()}


async def _wait_for_request(device: WebSocketDeviceSession) -> str:
    for _ in range(50):
        if device.websocket.send_json.await_count:
            return device.websocket.send_json.await_args.args[0]["request_id"]
        await asyncio.sleep(0.01)
    raise AssertionError("request_photo frame was never sent")


class TestDecodePhotoFrame:
    def test_decodes_base64(self):
        photo = decode_photo_frame(_photo_frame("abc"), "user-1")

        assert photo.buffer == JPEG
        assert photo.request_id == "abc"
        assert photo.mime_type == "image/jpeg"

    def test_invalid_base64(self):
        with pytest.raises(ValidationError):
            decode_photo_frame({"request_id": "abc", "data": "not base64!"}, "user-1")

    def test_missing_request_id(self):
        with pytest.raises(ValidationError):
            decode_photo_frame({"data": base64.b64encode(JPEG).decode()}, "user-1")


class TestRequestPhoto:
    @pytest.mark.asyncio
    async def test_photo_frame_resolves_matching_request(self):
        device = _device()
        task = asyncio.create_task(device.request_photo())
        request_id = await _wait_for_request(device)

        device.handle_frame(_photo_frame("someone-else"))
        device.handle_frame(_photo_frame(request_id))
        photo = await task

        assert photo.request_id == request_id
        assert photo.buffer == JPEG
        assert device.websocket.send_json.await_args.args[0]["type"] == "request_photo"

    @pytest.mark.asyncio
    async def test_no_photo_times_out(self):
        device = _device(timeout=0.05)

        with pytest.raises(CaptureTimeoutError):
            await device.request_photo()
        assert device._photos.pending_ids() == []

    @pytest.mark.asyncio
    async def test_close_fails_pending_request(self):
        device = _device()
        task = asyncio.create_task(device.request_photo())
        await _wait_for_request(device)

        device.close()

        with pytest.raises(CameraUnavailableError):
            await task
        with pytest.raises(CameraUnavailableError):
            await device.show_text("hello")

    @pytest.mark.asyncio
    async def test_device_without_camera(self):
        device = _device(DeviceCapabilities(has_display=True))

        with pytest.raises(CameraUnavailableError):
            await device.request_photo()
        device.websocket.send_json.assert_not_awaited()


class TestFrames:
    @pytest.mark.asyncio
    async def test_outbound_frames(self):
        device = _device()

        await device.show_text("Thinking...")
        await device.play_audio("https://utfs.io/f/tts")

        frames = [call.args[0] for call in device.websocket.send_json.await_args_list]
        assert frames == [
            {"type": "show_text", "text": "Thinking..."},
            {"type": "play_audio", "audio_url": "https://utfs.io/f/tts"},
        ]

    def test_events_reach_listeners(self):
        device = _device()
        presses, fragments = [], []
        device.on_button_press(presses.append)
        unsubscribe = device.on_transcription(fragments.append)

        device.handle_frame({"type": "button_press", "press_type": "long"})
        device.handle_frame({"type": "transcription", "text": "What's", "is_final": False})
        unsubscribe()
        device.handle_frame({"type": "transcription", "text": "ignored"})

        assert presses[0].press_type == "long"
        assert [(f.text, f.is_final) for f in fragments] == [("What's", False)]

    def test_unknown_frame_type(self):
        with pytest.raises(ValidationError):
            _device().handle_frame({"type": "reboot"})

    def test_capabilities_accept_camel_case(self):
        capabilities = DeviceCapabilities.from_dict({"hasCamera": True, "has_speaker": True})

        assert capabilities.has_camera is True
        assert capabilities.has_speaker is True
        assert capabilities.has_display is False
