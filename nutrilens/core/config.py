# Standard library imports
import os
from typing import Final, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    """

    def __init__(self) -> None:
        # Server Configuration
        self.port: Final[int] = int(os.getenv("PORT", "3000"))
        self.package_name: Final[str] = os.getenv("PACKAGE_NAME", "com.nutrilens.glasses")
        self.default_username: Final[str] = os.getenv("DEFAULT_USERNAME", "Nathan")

        # Database Configuration
        self.mongo_uri: Final[str] = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.mongo_database_name: Final[str] = os.getenv("MONGO_DB_NAME", "nutrilens")

        # Vision / Speech Configuration (Groq, OpenAI-compatible)
        self.groq_api_key: Final[str] = os.getenv("GROQ_API_KEY", "")
        self.vlm_model: Final[str] = os.getenv(
            "VLM_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct"
        )
        self.groq_tts_api_key: Final[str] = os.getenv("GROQ_TTS_API_KEY", self.groq_api_key)
        self.groq_tts_model: Final[str] = os.getenv("GROQ_TTS_MODEL", "canopylabs/orpheus-v1-english")
        self.groq_tts_voice: Final[str] = os.getenv("GROQ_TTS_VOICE", "troy")

        # Blob storage / Webhook Configuration
        self.uploadthing_token: Final[str] = os.getenv("UPLOADTHING_TOKEN", "")
        self.discord_webhook_url: Final[str] = os.getenv("DISCORD_WEBHOOK_URL", "")

        # Worker Configuration
        self.enable_workers: Final[bool] = _env_bool("ENABLE_WORKERS", "true")
        self.task_timeout_seconds: Final[float] = float(os.getenv("TASK_TIMEOUT_SECONDS", "30"))
        self.worker_startup_timeout_seconds: Final[float] = float(
            os.getenv("WORKER_STARTUP_TIMEOUT_SECONDS", "10")
        )

        # Camera / Session Configuration
        self.camera_cooldown_seconds: Final[float] = float(os.getenv("CAMERA_COOLDOWN_SECONDS", "2"))
        self.camera_acquire_timeout_seconds: Final[float] = float(
            os.getenv("CAMERA_ACQUIRE_TIMEOUT_SECONDS", "5")
        )
        self.camera_retry_step_seconds: Final[float] = float(
            os.getenv("CAMERA_RETRY_STEP_SECONDS", "0.25")
        )
        self.capture_timeout_seconds: Final[float] = float(os.getenv("CAPTURE_TIMEOUT_SECONDS", "15"))
        self.poll_interval_seconds: Final[float] = float(os.getenv("POLL_INTERVAL_SECONDS", "1"))
        self.stream_capture_interval_seconds: Final[float] = float(
            os.getenv("STREAM_CAPTURE_INTERVAL_SECONDS", "5")
        )
        self.stream_fallback_interval_seconds: Final[float] = float(
            os.getenv("STREAM_FALLBACK_INTERVAL_SECONDS", "30")
        )


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
