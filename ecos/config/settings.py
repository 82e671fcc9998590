from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenAiConfig(BaseSettings):
    """Google Gemini configuration."""

    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias="GEMINI_API_KEY",
    )
    text_model: str = Field(
        default="gemini-3-flash-preview",
        validation_alias="GENAI_TEXT_MODEL",
    )
    tts_model: str = Field(
        default="gemini-2.5-flash-preview-tts",
        validation_alias="GENAI_TTS_MODEL",
    )
    image_model: str = Field(
        default="gemini-2.5-flash-image",
        validation_alias="GENAI_IMAGE_MODEL",
    )
    timeout_seconds: float = Field(
        default=90.0,
        validation_alias="GENAI_TIMEOUT_SECONDS",
        gt=0.0,
    )
    temperature: float = Field(
        default=0.8,
        validation_alias="GENAI_TEMPERATURE",
        ge=0.0,
        le=2.0,
    )
    grounding_enabled: bool = Field(
        default=True,
        validation_alias="GENAI_GROUNDING_ENABLED",
        description="Enable Google Search grounding for the research call.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class PipelineConfig(BaseSettings):
    """Scenario pipeline tuning."""

    sample_rate_hz: int = Field(default=24000, ge=1)
    channels: int = Field(default=1, ge=1)
    max_sources: int = Field(default=3, ge=0)
    default_voice: str = "zephyr"
    portraits_enabled: bool = Field(
        default=True,
        description="If false, portrait generation is never requested.",
    )
    recent_queries_limit: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Ecos de México API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/scenario_pipeline.log"

    # Gemini
    genai: GenAiConfig = Field(default_factory=GenAiConfig)

    # Pipeline
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
