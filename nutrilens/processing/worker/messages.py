"""
Worker message contracts
------------------------

Messages travel from the event loop to a worker thread (WorkerMessage) and
back (WorkerResponse). Both are plain dataclasses so they can be built in
tests without a running worker.
"""
from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# Message types
# -----------------------------------------------------------------------------

PROCESS_IMAGE = "process_image"
ANSWER_QUESTION = "answer_question"
SYNTHESIZE_SPEECH = "synthesize_speech"

IMAGE_WORKER = "image"
AUDIO_WORKER = "audio"


@dataclass(frozen=True)
class WorkerMessage:
    """A task posted to a worker. `id` correlates the eventual response."""
    type: str
    id: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkerResponse:
    """Exactly one response is produced per WorkerMessage."""
    id: str
    success: bool
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, task_id: str, result: Any) -> "WorkerResponse":
        return cls(id=task_id, success=True, result=result)

    @classmethod
    def failed(cls, task_id: str, error: str) -> "WorkerResponse":
        return cls(id=task_id, success=False, error=error)
