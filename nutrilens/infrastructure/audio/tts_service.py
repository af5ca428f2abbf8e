"""Text-to-Speech service abstraction."""
import base64
import io
import logging
import re
from typing import Optional, List

import httpx
from pydub import AudioSegment

from ...core.config import get_settings
from ...core.exceptions import SynthesisError
from ...infrastructure.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class TTSService:
    """
    Text-to-Speech service for converting text to audio.

    This service wraps Groq's speech endpoint and provides:
    - Connection pooling via an injected HTTP client
    - Text chunking for long answers
    - Audio concatenation
    - Retry logic
    """

    GROQ_TTS_URL = "https://api.groq.com/openai/v1/audio/speech"

    # Groq TTS character limit
    TTS_MAX_CHARS = 200

    # Spoken forms for the units that show up in nutrition answers
    UNIT_MAP = {
        r'(\d)\s?mg\b': r'\1 milligrams',
        r'(\d)\s?µg\b': r'\1 micrograms',
        r'(\d)\s?mcg\b': r'\1 micrograms',
        r'(\d)\s?kcal\b': r'\1 calories',
        r'(\d)\s?g\b': r'\1 grams',
    }

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize TTS service.

        Args:
            http_client: Optional async HTTP client for connection pooling.
                        If None, creates a new client per request.
        """
        settings = get_settings()
        self.api_key = settings.groq_tts_api_key
        self.tts_model = settings.groq_tts_model
        self.tts_voice = settings.groq_tts_voice
        self._http_client = http_client

        if not self.api_key:
            logger.warning("GROQ_TTS_API_KEY not found in environment variables")

    def _preprocess_text_for_tts(self, text: str) -> str:
        """
        Strip markdown and spell out units so the answer reads naturally aloud.
        """
        if not text:
            return ""

        processed = re.sub(r'[*_`#>]+', '', text)
        processed = re.sub(r'^\s*[-•]\s+', '', processed, flags=re.MULTILINE)
        for pattern, replacement in self.UNIT_MAP.items():
            processed = re.sub(pattern, replacement, processed)

        processed = re.sub(r'\s+', ' ', processed)
        return processed.strip()

    def _chunk_text(self, text: str, max_chars: int = TTS_MAX_CHARS) -> List[str]:
        """
        Split text into chunks that respect sentence boundaries when possible.

        Args:
            text: Text to chunk
            max_chars: Maximum characters per chunk

        Returns:
            List of text chunks, each <= max_chars
        """
        if len(text) <= max_chars:
            return [text]

        chunks = []
        # Split by sentences first, keeping the separator
        sentences = re.split(r'([.!?]\s+)', text)

        current_chunk = ""
        for i in range(0, len(sentences), 2):
            sentence = sentences[i]
            punctuation = sentences[i + 1] if i + 1 < len(sentences) else ""
            full_sentence = sentence + punctuation

            if current_chunk and len(current_chunk) + len(full_sentence) > max_chars:
                chunks.append(current_chunk.strip())
                current_chunk = full_sentence
            else:
                current_chunk += full_sentence

            # A single sentence that is too long is split by words
            if len(current_chunk) > max_chars:
                temp_chunk = ""
                for word in current_chunk.split():
                    # Words longer than the limit are hard-split
                    while len(word) > max_chars:
                        if temp_chunk:
                            chunks.append(temp_chunk)
                            temp_chunk = ""
                        chunks.append(word[:max_chars])
                        word = word[max_chars:]
                    if len(temp_chunk) + len(word) + 1 > max_chars:
                        if temp_chunk:
                            chunks.append(temp_chunk)
                        temp_chunk = word
                    else:
                        temp_chunk = f"{temp_chunk} {word}" if temp_chunk else word
                current_chunk = temp_chunk

        if current_chunk.strip():
            chunks.append(current_chunk.strip())

        return [chunk for chunk in chunks if chunk]

    async def _synthesize_chunk(
        self,
        text: str,
        tts_voice: str,
        client: httpx.AsyncClient
    ) -> bytes:
        """Synthesize a single text chunk to WAV bytes."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        payload = {
            "model": self.tts_model,
            "input": text,
            "voice": tts_voice,
            "response_format": "wav"
        }

        async def _synthesize_internal():
            response = await client.post(
                self.GROQ_TTS_URL,
                json=payload,
                headers=headers
            )
            response.raise_for_status()

            content_type = response.headers.get("content-type", "").lower()
            if "application/json" in content_type:
                # Some deployments return base64 audio in a JSON body
                result = response.json()
                audio_base64 = result.get("audio") or result.get("data") or result.get("content")
                if not audio_base64:
                    raise SynthesisError("No audio data in Groq TTS response", retryable=False)
                return base64.b64decode(audio_base64)

            if not response.content:
                raise SynthesisError("No audio data in Groq TTS response", retryable=False)
            return response.content

        def _is_transient(error: BaseException) -> bool:
            # 4xx errors are the caller's fault: no retry
            if isinstance(error, httpx.HTTPStatusError):
                return error.response.status_code >= 500
            return True

        return await retry_with_backoff(
            _synthesize_internal,
            max_retries=2,  # 3 total attempts
            initial_delay=1.0,
            max_delay=10.0,
            exceptions=(httpx.TimeoutException, httpx.HTTPStatusError, httpx.TransportError),
            should_retry=_is_transient,
        )

    def _concatenate_audio_chunks(self, audio_chunks: List[bytes]) -> bytes:
        """
        Concatenate WAV chunks with a 50ms silence gap between them.
        """
        if not audio_chunks:
            raise ValueError("No audio chunks to concatenate")

        if len(audio_chunks) == 1:
            return audio_chunks[0]

        segments = [AudioSegment.from_file(io.BytesIO(chunk), format="wav") for chunk in audio_chunks]
        silence = AudioSegment.silent(duration=50)
        combined = segments[0]
        for segment in segments[1:]:
            combined = combined + silence + segment

        buffer = io.BytesIO()
        combined.export(buffer, format="wav")
        logger.debug(f"Concatenated {len(audio_chunks)} audio chunks")
        return buffer.getvalue()

    async def synthesize(self, text: str, voice: Optional[str] = None) -> bytes:
        """
        Convert text to audio.

        Args:
            text: Text to convert to speech
            voice: Voice to use (defaults to GROQ_TTS_VOICE)

        Returns:
            Audio bytes (WAV format)

        Raises:
            ValueError: If text is empty
            SynthesisError: If synthesis fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if not self.api_key:
            raise SynthesisError("GROQ_TTS_API_KEY is not configured", retryable=False)

        processed_text = self._preprocess_text_for_tts(text)
        tts_voice = voice or self.tts_voice
        text_chunks = self._chunk_text(processed_text, max_chars=self.TTS_MAX_CHARS)

        if len(text_chunks) > 1:
            logger.info(
                f"Text exceeds {self.TTS_MAX_CHARS} chars, splitting into {len(text_chunks)} chunks "
                f"(total: {len(text)} chars)"
            )

        client = self._http_client or httpx.AsyncClient(timeout=120.0)
        try:
            audio_chunks = []
            for i, chunk in enumerate(text_chunks, 1):
                logger.debug(f"Synthesizing chunk {i}/{len(text_chunks)} ({len(chunk)} chars)")
                audio_chunks.append(await self._synthesize_chunk(chunk, tts_voice, client))

            combined_audio = self._concatenate_audio_chunks(audio_chunks)
            logger.info(
                f"Successfully synthesized speech: {len(combined_audio)} bytes "
                f"from {len(text_chunks)} chunk(s)"
            )
            return combined_audio

        except SynthesisError:
            raise
        except httpx.TimeoutException as e:
            logger.error("Timeout while calling Groq TTS API")
            raise SynthesisError("Timeout while synthesizing speech") from e
        except httpx.HTTPStatusError as e:
            error_detail = f"Groq TTS API error: {e.response.status_code} - {e.response.text[:200]}"
            logger.error(error_detail)
            raise SynthesisError(error_detail, retryable=e.response.status_code >= 500) from e
        except Exception as e:
            logger.error(f"Unexpected error in Groq TTS: {e}", exc_info=True)
            raise SynthesisError(f"Speech synthesis failed: {e}") from e
        finally:
            if client is not self._http_client:
                await client.aclose()
