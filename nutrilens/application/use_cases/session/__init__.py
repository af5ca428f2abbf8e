from .play_speech import PlaySpeechUseCase
from .set_streaming import SetStreamingUseCase

__all__ = ["PlaySpeechUseCase", "SetStreamingUseCase"]
