from .dispatcher import TaskDispatcher
from .messages import (
    ANSWER_QUESTION,
    AUDIO_WORKER,
    IMAGE_WORKER,
    PROCESS_IMAGE,
    SYNTHESIZE_SPEECH,
    WorkerMessage,
    WorkerResponse,
)
from .task_channel import TaskChannel
from .worker_manager import WorkerManager

__all__ = [
    "TaskDispatcher",
    "TaskChannel",
    "WorkerManager",
    "WorkerMessage",
    "WorkerResponse",
    "PROCESS_IMAGE",
    "ANSWER_QUESTION",
    "SYNTHESIZE_SPEECH",
    "IMAGE_WORKER",
    "AUDIO_WORKER",
]
