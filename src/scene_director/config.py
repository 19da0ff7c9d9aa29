"""Application configuration loaded from environment variables."""

from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Provider API key (the GenAI SDK itself also reads GOOGLE_API_KEY)
    gemini_api_key: str = Field(
        default="", validation_alias=AliasChoices("gemini_api_key", "google_api_key")
    )

    # Model Configuration
    text_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    tts_model: str = "gemini-2.5-flash-preview-tts"

    # Narration
    tts_sample_rate: int = 24000

    # Orchestration
    operation_timeout_sec: Optional[float] = None  # unset = wait on the provider indefinitely
    bulk_enhance_policy: Literal["all_or_nothing", "partial"] = "all_or_nothing"

    # Production defaults
    default_aspect_ratio: str = "16:9"
    default_voice: str = "Kore"
    default_thumbnail_prompt: str = (
        "Create a highly engaging, viral-worthy thumbnail. Blend the most dramatic visuals "
        "from the production. Hyper-realistic, 8k, cinematic lighting."
    )

    # CORS
    allowed_origins: str = ""


settings = Settings()
