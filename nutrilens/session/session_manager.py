"""
Session Interaction State Machine
---------------------------------

Role:
- Own per-user session state (one SessionState per connected user)
- Turn device events into captures: short press (single photo), long press
  (spoken question about a photo) and the streaming timer
- Serialize camera access per user with an in-use flag plus cooldown

Concurrency:
- Every method runs on the main event loop. The camera check-and-set has no
  await between the check and the set, so two triggers can never both see
  the camera as free.
- Event handlers never raise: failures become a short status message on the
  glasses and the session returns to a resting phase.
"""
# Standard library imports
import asyncio
import logging
import math
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Coroutine, Dict, List, Optional, Set

# Local application imports
from ..core.config import Settings, get_settings
from ..core.exceptions import (
    CameraBusyError,
    CaptureTimeoutError,
    NutritionLensError,
    SessionNotFoundError,
    ValidationError,
    get_user_message,
)
from ..domain.models.photo import PhotoData
from ..domain.models.user_profile import UserDietaryProfile
from ..domain.repositories.user_profile_repository import UserProfileRepository
from ..processing.photo_pipeline import PhotoPipeline
from ..processing.speech_service import SpeechService
from .device import LONG_PRESS, SHORT_PRESS, ButtonPress, DeviceSession, Transcription
from .state import SessionPhase, SessionState

logger = logging.getLogger(__name__)

LISTENING_MESSAGE = "Listening..."
NO_QUESTION_MESSAGE = "No question captured"
THINKING_MESSAGE = "Thinking..."


class SessionManager:
    """Per-user interaction state machine with cooperative camera locking."""

    def __init__(
        self,
        photo_pipeline: PhotoPipeline,
        speech_service: SpeechService,
        profile_repository: UserProfileRepository,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.photo_pipeline = photo_pipeline
        self.speech_service = speech_service
        self.profile_repository = profile_repository
        self.settings = settings or get_settings()
        self._clock = clock
        self._states: Dict[str, SessionState] = {}
        self._background_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def on_session(self, device: DeviceSession, session_id: str, user_id: str) -> None:
        """Start tracking a new device session for a user."""
        previous = self._states.get(user_id)
        if previous is not None:
            logger.info(f"Replacing session {previous.session_id} for user {user_id}")
            self._teardown(user_id, previous)

        state = SessionState(session_id=session_id, device=device, next_capture_at=self._clock())
        self._states[user_id] = state
        logger.info(f"Session {session_id} started for user {user_id}")

        capabilities = device.capabilities
        if capabilities.has_camera:
            await self._prewarm_camera(user_id, state)
        else:
            logger.warning(f"No camera available for user {user_id}")

        if self._states.get(user_id) is not state:
            # Stopped while pre-warming
            return

        if capabilities.has_button:
            state.unsubscribers.append(
                device.on_button_press(lambda press: self._on_button_press(user_id, press))
            )
        if capabilities.has_microphone:
            state.unsubscribers.append(
                device.on_transcription(lambda fragment: self._on_transcription(user_id, fragment))
            )
        state.polling_task = asyncio.create_task(self._poll(user_id, state))

    async def on_stop(self, session_id: str, user_id: str, reason: str) -> None:
        """Tear down a session: stop the timer, drop listeners, forget the user."""
        state = self._states.get(user_id)
        if state is None or state.session_id != session_id:
            logger.debug(f"Ignoring stop for unknown session {session_id} of user {user_id}")
            return
        self._teardown(user_id, state)
        logger.info(f"Session stopped for user {user_id}, reason: {reason}")

    async def shutdown(self) -> None:
        """Stop every session and cancel in-flight handlers (application shutdown)."""
        for user_id, state in list(self._states.items()):
            self._teardown(user_id, state)
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _teardown(self, user_id: str, state: SessionState) -> None:
        if state.polling_task is not None:
            state.polling_task.cancel()
        for task in list(state.tasks):
            task.cancel()
        state.tasks.clear()
        for unsubscribe in state.unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                logger.warning(f"Failed to remove device listener for user {user_id}: {e}")
        state.unsubscribers.clear()
        self._states.pop(user_id, None)

    async def _prewarm_camera(self, user_id: str, state: SessionState) -> None:
        # One throwaway capture so the first real one is fast
        try:
            async with self.camera(user_id, wait=False, state=state):
                await self._capture(state)
            state.camera_ready = True
            logger.info(f"Camera pre-warmed for user {user_id}")
        except Exception as e:
            state.camera_ready = False
            logger.warning(f"Error pre-warming camera for user {user_id}: {e}")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def has_session(self, user_id: str) -> bool:
        return user_id in self._states

    def get_state(self, user_id: str) -> Optional[SessionState]:
        return self._states.get(user_id)

    def get_phase(self, user_id: str) -> Optional[SessionPhase]:
        state = self._states.get(user_id)
        return state.phase if state is not None else None

    @property
    def active_users(self) -> List[str]:
        return list(self._states)

    # ------------------------------------------------------------------
    # Camera lock
    # ------------------------------------------------------------------

    def try_acquire_camera(self, user_id: str, state: Optional[SessionState] = None) -> bool:
        """
        Take the camera if it is free and cooled down. Never suspends.

        When state is given, the lock is only taken while that state is still
        the user's current session.
        """
        current = self._states.get(user_id)
        if current is None or (state is not None and current is not state):
            return False
        if current.camera_in_use:
            return False
        if (
            current.last_operation_at is not None
            and self._clock() - current.last_operation_at < self.settings.camera_cooldown_seconds
        ):
            return False
        current.camera_in_use = True
        return True

    async def acquire_camera(
        self, user_id: str, wait: bool = True, state: Optional[SessionState] = None
    ) -> bool:
        """
        Acquire the camera, retrying in small steps up to the acquire timeout.

        Returns:
            True when acquired, False when the wait was exhausted (or not allowed)
        """
        state = state or self._states.get(user_id)
        if state is None:
            return False
        if self.try_acquire_camera(user_id, state):
            return True
        if not wait:
            return False

        step = self.settings.camera_retry_step_seconds
        attempts = max(1, math.ceil(self.settings.camera_acquire_timeout_seconds / step))
        for _ in range(attempts):
            await asyncio.sleep(step)
            if self._states.get(user_id) is not state:
                return False
            if self.try_acquire_camera(user_id, state):
                return True
        return False

    def release_camera(self, user_id: str, state: Optional[SessionState] = None) -> None:
        """Release the lock held on state (default: the current session)."""
        current = self._states.get(user_id)
        if state is None:
            state = current
        if state is None or state is not current:
            # A replaced session never touches its successor's lock
            return
        state.camera_in_use = False
        state.last_operation_at = self._clock()

    @asynccontextmanager
    async def camera(
        self, user_id: str, wait: bool = True, state: Optional[SessionState] = None
    ) -> AsyncIterator[None]:
        """Hold the camera for the body of the block; always released on exit."""
        state = state or self._states.get(user_id)
        if state is None or not await self.acquire_camera(user_id, wait=wait, state=state):
            raise CameraBusyError(user_id, self.settings.camera_acquire_timeout_seconds if wait else 0.0)
        try:
            yield
        finally:
            self.release_camera(user_id, state)

    async def _capture(self, state: SessionState) -> PhotoData:
        timeout = self.settings.capture_timeout_seconds
        try:
            return await asyncio.wait_for(state.device.request_photo(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CaptureTimeoutError(f"No photo from device within {timeout}s") from e

    # ------------------------------------------------------------------
    # Device events
    # ------------------------------------------------------------------

    def _spawn(self, state: SessionState, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        state.tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(state.tasks.discard)
        return task

    def _on_button_press(self, user_id: str, press: ButtonPress) -> None:
        state = self._states.get(user_id)
        if state is None:
            return
        if press.press_type == LONG_PRESS:
            self._spawn(state, self.handle_long_press(user_id))
        elif press.press_type == SHORT_PRESS:
            self._spawn(state, self.handle_short_press(user_id))
        else:
            logger.warning(f"Unknown button press type from user {user_id}: {press.press_type}")

    def _on_transcription(self, user_id: str, fragment: Transcription) -> None:
        self.handle_transcription(user_id, fragment.text, fragment.is_final)

    async def handle_short_press(self, user_id: str) -> None:
        """Single capture: acquire, capture, upload + analyze, persist, release."""
        state = self._states.get(user_id)
        if state is None:
            return
        if state.camera_in_use:
            logger.info(f"Capture already in flight for user {user_id}, ignoring short press")
            return

        try:
            async with self.camera(user_id, state=state):
                photo = await self._capture(state)
                self.photo_pipeline.cache_photo(photo, user_id)
                await self.photo_pipeline.process_photo(photo)
        except Exception as e:
            await self._report_failure(user_id, state, "taking photo", e)

    async def handle_long_press(self, user_id: str) -> None:
        """Start capturing a spoken question, or finish and answer it."""
        state = self._states.get(user_id)
        if state is None:
            return

        if not state.question_capturing:
            state.question_capturing = True
            state.question_buffer = ""
            logger.info(f"Question capture started for user {user_id}")
            await self._show(state, LISTENING_MESSAGE)
            return

        state.question_capturing = False
        question = state.question_buffer.strip()
        if not question:
            state.question_buffer = ""
            await self._show(state, NO_QUESTION_MESSAGE)
            return

        logger.info(f"Answering question for user {user_id}: {question!r}")
        try:
            async with self.camera(user_id, state=state):
                photo = await self._capture(state)
                self.photo_pipeline.cache_photo(photo, user_id)
                await self._show(state, THINKING_MESSAGE)
                username = self.settings.default_username
                profiles = await self._load_profiles()
                answer = await self.photo_pipeline.answer_question(photo, question, username, profiles)

            await self._show(state, answer)
            if state.device.capabilities.has_speaker:
                audio_url = await self.speech_service.synthesize(answer, user_id)
                await state.device.play_audio(audio_url)
        except Exception as e:
            await self._report_failure(user_id, state, "answering question", e)
        finally:
            if not state.question_capturing:
                state.question_buffer = ""

    def handle_transcription(self, user_id: str, text: str, is_final: bool) -> None:
        """Append final fragments verbatim while a question is being captured."""
        state = self._states.get(user_id)
        if state is None or not state.question_capturing or not is_final:
            return
        state.question_buffer += text

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def _poll(self, user_id: str, state: SessionState) -> None:
        while self._states.get(user_id) is state:
            await asyncio.sleep(self.settings.poll_interval_seconds)
            await self.tick(user_id)

    async def tick(self, user_id: str) -> None:
        """One timer step: capture if streaming and the next capture is due."""
        state = self._states.get(user_id)
        if state is None or not state.streaming or self._clock() < state.next_capture_at:
            return

        # Busy camera: try again on the next tick
        if not self.try_acquire_camera(user_id, state):
            return

        try:
            # Pushed out first so a failing capture cannot retry every tick
            state.next_capture_at = self._clock() + self.settings.stream_fallback_interval_seconds
            photo = await self._capture(state)
            state.next_capture_at = self._clock() + self.settings.stream_capture_interval_seconds
            self.photo_pipeline.cache_photo(photo, user_id)
            await self.photo_pipeline.process_photo(photo)
        except Exception as e:
            await self._report_failure(user_id, state, "auto-taking photo", e)
        finally:
            self.release_camera(user_id, state)

    async def set_streaming(self, user_id: str, enabled: bool) -> bool:
        """Turn periodic capture on or off. Returns the new streaming flag."""
        state = self._states.get(user_id)
        if state is None:
            raise SessionNotFoundError(user_id)
        state.streaming = enabled
        if enabled:
            state.next_capture_at = self._clock()
        logger.info(f"Streaming photos for user {user_id} is now {enabled}")
        await self._show(state, "Streaming on" if enabled else "Streaming off")
        return enabled

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------

    async def play_speech(self, user_id: str, text: str) -> str:
        """
        Synthesize text and play it on the user's glasses.

        Returns:
            URL of the synthesized audio

        Raises:
            SessionNotFoundError: the user has no active session
            ValidationError: empty text or no speaker on the device
        """
        if not text or not text.strip():
            raise ValidationError("Text is required", user_message="Text is required")
        state = self._states.get(user_id)
        if state is None:
            raise SessionNotFoundError(user_id)
        if not state.device.capabilities.has_speaker:
            raise ValidationError(
                f"Device of user {user_id} has no speaker",
                user_message="Audio playback not supported on this device",
            )

        audio_url = await self.speech_service.synthesize(text, user_id)
        await state.device.play_audio(audio_url)
        logger.info(f"TTS audio played successfully for user {user_id}")
        return audio_url

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_profiles(self) -> List[UserDietaryProfile]:
        try:
            return await self.profile_repository.list_all()
        except Exception as e:
            logger.warning(f"Could not load dietary profiles, answering without them: {e}")
            return []

    async def _show(self, state: SessionState, text: str) -> None:
        if not state.device.capabilities.has_display:
            return
        try:
            await state.device.show_text(text)
        except Exception as e:
            logger.warning(f"Failed to show text on device: {e}")

    async def _report_failure(self, user_id: str, state: SessionState, action: str, error: Exception) -> None:
        if isinstance(error, (CameraBusyError, CaptureTimeoutError)):
            logger.warning(f"Error {action} for user {user_id}: {error}")
        elif isinstance(error, NutritionLensError):
            logger.error(f"Error {action} for user {user_id}: {error}")
        else:
            logger.error(f"Unexpected error {action} for user {user_id}: {error}", exc_info=True)
        if self._states.get(user_id) is state:
            await self._show(state, get_user_message(error))
