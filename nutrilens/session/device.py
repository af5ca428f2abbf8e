"""
Device session interface
------------------------

The minimal surface of a pair of glasses that the session state machine
depends on. Transports (the WebSocket gateway, test fakes) subclass
DeviceSession and implement the I/O methods; listener bookkeeping is shared.
"""
# Standard library imports
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

# Local application imports
from ..domain.models.photo import PhotoData

logger = logging.getLogger(__name__)

SHORT_PRESS = "short"
LONG_PRESS = "long"


@dataclass(frozen=True)
class DeviceCapabilities:
    has_camera: bool = False
    has_microphone: bool = False
    has_button: bool = False
    has_display: bool = False
    has_speaker: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DeviceCapabilities":
        """Accept snake_case or camelCase flags; anything missing is False."""
        data = data or {}

        def flag(name: str, camel: str) -> bool:
            return bool(data.get(name, data.get(camel, False)))

        return cls(
            has_camera=flag("has_camera", "hasCamera"),
            has_microphone=flag("has_microphone", "hasMicrophone"),
            has_button=flag("has_button", "hasButton"),
            has_display=flag("has_display", "hasDisplay"),
            has_speaker=flag("has_speaker", "hasSpeaker"),
        )


@dataclass(frozen=True)
class ButtonPress:
    press_type: str


@dataclass(frozen=True)
class Transcription:
    text: str
    is_final: bool = True


ButtonHandler = Callable[[ButtonPress], None]
TranscriptionHandler = Callable[[Transcription], None]
Unsubscribe = Callable[[], None]


class DeviceSession(ABC):
    """One live connection to a wearer's glasses."""

    def __init__(self, capabilities: DeviceCapabilities) -> None:
        self.capabilities = capabilities
        self._button_handlers: List[ButtonHandler] = []
        self._transcription_handlers: List[TranscriptionHandler] = []

    @abstractmethod
    async def request_photo(self) -> PhotoData:
        """Capture a photo. Raises on device failure."""
        pass

    @abstractmethod
    async def show_text(self, text: str) -> None:
        pass

    @abstractmethod
    async def play_audio(self, url: str) -> None:
        pass

    def on_button_press(self, handler: ButtonHandler) -> Unsubscribe:
        return self._subscribe(self._button_handlers, handler)

    def on_transcription(self, handler: TranscriptionHandler) -> Unsubscribe:
        return self._subscribe(self._transcription_handlers, handler)

    def emit_button_press(self, press: ButtonPress) -> None:
        self._emit(self._button_handlers, press)

    def emit_transcription(self, transcription: Transcription) -> None:
        self._emit(self._transcription_handlers, transcription)

    @property
    def listener_count(self) -> int:
        return len(self._button_handlers) + len(self._transcription_handlers)

    @staticmethod
    def _subscribe(handlers: List[Callable], handler: Callable) -> Unsubscribe:
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    @staticmethod
    def _emit(handlers: List[Callable], event: Any) -> None:
        for handler in list(handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Device event handler failed: {e}", exc_info=True)
