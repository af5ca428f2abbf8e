from typing import Dict
from pydantic import BaseModel


class SpeechRequest(BaseModel):
    """DTO for speech playback request"""
    text: str


class SpeechResponse(BaseModel):
    success: bool = True
    message: str = "TTS played successfully"
    audio_url: str


class StreamingRequest(BaseModel):
    """DTO for toggling periodic capture"""
    enabled: bool


class StreamingResponse(BaseModel):
    user_id: str
    streaming: bool


class WorkerStats(BaseModel):
    active: bool
    pending_tasks: int


class WorkerStatsResponse(BaseModel):
    """Per worker type status; worker types that are not running are absent"""
    workers: Dict[str, WorkerStats]
