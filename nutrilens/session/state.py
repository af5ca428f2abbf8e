# Standard library imports
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

# Local application imports
from .device import DeviceSession, Unsubscribe


class SessionPhase(str, Enum):
    IDLE = "idle"
    STREAMING_ARMED = "streaming_armed"
    QUESTION_CAPTURING = "question_capturing"
    CAPTURE_IN_FLIGHT = "capture_in_flight"


@dataclass
class SessionState:
    """Everything the session manager tracks for one connected user."""
    session_id: str
    device: DeviceSession
    streaming: bool = False
    next_capture_at: float = 0.0
    camera_ready: bool = False
    camera_in_use: bool = False
    last_operation_at: Optional[float] = None
    question_capturing: bool = False
    question_buffer: str = ""
    polling_task: Optional[asyncio.Task] = None
    # Press handlers spawned for this session; cancelled on teardown
    tasks: Set[asyncio.Task] = field(default_factory=set)
    unsubscribers: List[Unsubscribe] = field(default_factory=list)

    @property
    def phase(self) -> SessionPhase:
        # Holding the camera wins over every other flag
        if self.camera_in_use:
            return SessionPhase.CAPTURE_IN_FLIGHT
        if self.question_capturing:
            return SessionPhase.QUESTION_CAPTURING
        if self.streaming:
            return SessionPhase.STREAMING_ARMED
        return SessionPhase.IDLE
