"""
Custom exception hierarchy for the Nutrition Lens backend.

Used by the worker pool, the dispatch layer, the session state machine and
the external service clients. All exceptions inherit from NutritionLensError
and can carry a short user-facing message suitable for the glasses display.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------


class NutritionLensError(Exception):
    """Base exception for all Nutrition Lens errors."""

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or "Something went wrong. Please try again."
        self.details = details or {}


# -----------------------------------------------------------------------------
# Validation / session
# -----------------------------------------------------------------------------


class ValidationError(NutritionLensError):
    """Raised when input validation fails."""
    pass


class SessionNotFoundError(NutritionLensError):
    """Raised when no active device session exists for a user."""

    def __init__(self, user_id: str):
        super().__init__(
            f"No active session found for user {user_id}",
            user_message="No active session found.",
            details={"user_id": user_id},
        )
        self.user_id = user_id


# -----------------------------------------------------------------------------
# Camera
# -----------------------------------------------------------------------------


class CameraBusyError(NutritionLensError):
    """Raised when the camera could not be acquired within the wait bound."""

    def __init__(self, user_id: str, waited_seconds: float):
        super().__init__(
            f"Camera busy for user {user_id} after waiting {waited_seconds:.2f}s",
            user_message="Camera busy, try again.",
            details={"user_id": user_id, "waited_seconds": waited_seconds},
        )


class CaptureTimeoutError(NutritionLensError):
    """Raised when the device did not deliver a photo in time."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, user_message="Photo capture timed out.", **kwargs)


class CameraUnavailableError(NutritionLensError):
    """Raised when the device has no camera."""

    def __init__(self, user_id: str):
        super().__init__(
            f"No camera available for user {user_id}",
            user_message="No camera available.",
            details={"user_id": user_id},
        )


# -----------------------------------------------------------------------------
# Worker pool
# -----------------------------------------------------------------------------


class WorkerError(NutritionLensError):
    """Base exception for background worker failures."""

    def __init__(self, message: str, worker_type: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", "Background processing failed.")
        super().__init__(message, **kwargs)
        self.worker_type = worker_type


class WorkerUnavailableError(WorkerError):
    """Raised when a task is sent to a worker type that is not running."""

    def __init__(self, worker_type: str):
        super().__init__(f"Worker {worker_type} not initialized", worker_type=worker_type)


class TaskTimeoutError(WorkerError):
    """Raised when a worker does not answer a task in time."""

    def __init__(self, task_id: str, timeout_seconds: float, worker_type: Optional[str] = None):
        super().__init__(
            f"Task {task_id} timed out after {timeout_seconds * 1000:.0f}ms",
            worker_type=worker_type,
            details={"task_id": task_id, "timeout_seconds": timeout_seconds},
        )
        self.task_id = task_id


class WorkerTaskError(WorkerError):
    """Raised when a worker answers a task with a failure response."""
    pass


class WorkerTerminatedError(WorkerError):
    """Raised for tasks still pending when their worker is stopped or crashes."""
    pass


class FatalWorkerError(WorkerError):
    """Raised inside a worker handler when the worker itself can no longer run."""
    pass


# -----------------------------------------------------------------------------
# External services
# -----------------------------------------------------------------------------


class ExternalServiceError(NutritionLensError):
    """Base exception for external service errors."""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        retryable: bool = True,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.service_name = service_name
        self.retryable = retryable


class StorageError(ExternalServiceError):
    """Raised when an upload to blob storage fails."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(
            message,
            service_name="UploadThing",
            user_message="Photo upload failed.",
            **kwargs,
        )


class AnalysisError(ExternalServiceError):
    """Raised when the vision-language model call fails."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(
            message,
            service_name="VLM",
            user_message="Analysis failed.",
            **kwargs,
        )


class SynthesisError(ExternalServiceError):
    """Raised when speech synthesis fails."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("retryable", False)
        super().__init__(
            message,
            service_name="TTS",
            user_message="Speech playback failed.",
            **kwargs,
        )


# -----------------------------------------------------------------------------
# Safe user-facing message
# -----------------------------------------------------------------------------

def get_user_message(exc: BaseException) -> str:
    """
    Return a safe, user-facing message for any exception.
    Use this at display/API boundaries so internal details are never exposed.
    """
    if isinstance(exc, NutritionLensError) and getattr(exc, "user_message", None):
        return exc.user_message
    return "Something went wrong. Please try again."
