"""
Unit tests for TTSService text preparation and Groq speech calls.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from nutrilens.core.exceptions import SynthesisError
from nutrilens.infrastructure.audio.tts_service import TTSService

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt "


def _speech_response(status_code: int = 200, content: bytes = WAV_BYTES) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=content,
        headers={"content-type": "audio/wav"},
        request=httpx.Request("POST", TTSService.GROQ_TTS_URL),
    )


class TestTextPreparation:
    def test_preprocess_strips_markdown_and_expands_units(self, mock_settings):
        service = TTSService()

        text = service._preprocess_text_for_tts("**Calories:** 250 kcal\n- Protein: 12g\n- Sodium: 300 mg")

        assert text == "Calories: 250 calories Protein: 12 grams Sodium: 300 milligrams"

    def test_short_text_is_single_chunk(self, mock_settings):
        service = TTSService()

        assert service._chunk_text("Hello there.") == ["Hello there."]

    def test_chunks_respect_limit_and_keep_all_words(self, mock_settings):
        service = TTSService()
        sentence = "This meal has a good balance of protein and fiber with some healthy fats. "
        text = (sentence * 8).strip()

        chunks = service._chunk_text(text)

        assert len(chunks) > 1
        assert all(len(chunk) <= TTSService.TTS_MAX_CHARS for chunk in chunks)
        assert " ".join(chunks).split() == text.split()

    def test_overlong_word_is_hard_split(self, mock_settings):
        service = TTSService()
        text = "a" * 450

        chunks = service._chunk_text(text)

        assert [len(chunk) for chunk in chunks] == [200, 200, 50]


class TestSynthesize:
    @pytest.mark.asyncio
    async def test_single_chunk_returns_audio(self, mock_settings):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(return_value=_speech_response())
        service = TTSService(http_client=client)

        audio = await service.synthesize("Enjoy your meal.")

        assert audio == WAV_BYTES
        payload = client.post.await_args.kwargs["json"]
        assert payload["voice"] == "troy"
        assert payload["model"] == "test-tts"
        assert payload["response_format"] == "wav"

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, mock_settings):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(return_value=_speech_response(status_code=400, content=b"bad voice"))
        service = TTSService(http_client=client)

        with pytest.raises(SynthesisError) as exc_info:
            await service.synthesize("Enjoy your meal.", voice="nobody")

        assert client.post.await_count == 1
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, mock_settings):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(side_effect=[_speech_response(status_code=503, content=b""), _speech_response()])
        service = TTSService(http_client=client)

        with patch("nutrilens.infrastructure.utils.retry.asyncio.sleep", new=AsyncMock()):
            audio = await service.synthesize("Enjoy your meal.")

        assert audio == WAV_BYTES
        assert client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_multiple_chunks_are_concatenated(self, mock_settings):
        client = MagicMock(spec=httpx.AsyncClient)
        client.post = AsyncMock(return_value=_speech_response())
        service = TTSService(http_client=client)

        with patch.object(service, "_concatenate_audio_chunks", return_value=b"combined") as concat:
            audio = await service.synthesize("Plenty of fiber here. " * 20)

        assert audio == b"combined"
        chunks = concat.call_args.args[0]
        assert len(chunks) == client.post.await_count
        assert len(chunks) > 1

    @pytest.mark.asyncio
    async def test_empty_text_raises_value_error(self, mock_settings):
        service = TTSService(http_client=MagicMock(spec=httpx.AsyncClient))

        with pytest.raises(ValueError):
            await service.synthesize("   ")

    @pytest.mark.asyncio
    async def test_missing_api_key_raises(self, mock_settings):
        mock_settings.groq_tts_api_key = ""
        service = TTSService(http_client=MagicMock(spec=httpx.AsyncClient))

        with pytest.raises(SynthesisError):
            await service.synthesize("Hello")
