from .device import ButtonPress, DeviceCapabilities, DeviceSession, Transcription
from .session_manager import SessionManager
from .state import SessionPhase, SessionState

__all__ = [
    "ButtonPress",
    "DeviceCapabilities",
    "DeviceSession",
    "Transcription",
    "SessionManager",
    "SessionPhase",
    "SessionState",
]
