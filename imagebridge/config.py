from functools import lru_cache
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the image bridge."""

    #----------------------------------------------------------
    # Provider settings
    #----------------------------------------------------------
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("IMAGEBRIDGE_GEMINI_API_KEY", "GEMINI_API_KEY"),
        description="API key for authenticating with the Gemini image generation service.",
    )

    image_model_id: str = Field(
        default="imagen-3.0-generate-002",
        description="Imagen model id used for image generation.",
    )

    #----------------------------------------------------------
    # Server settings
    #----------------------------------------------------------
    cors_origin: str = Field(
        default="http://localhost:5173",
        description="The single browser origin allowed to call the API.",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the uvicorn server binds to.",
    )
    port: int = Field(
        default=5000,
        description="Port the uvicorn server listens on.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level used when running the module directly.",
    )

    model_config = SettingsConfigDict(
        env_prefix="IMAGEBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.gemini_api_key.get_secret_value().strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
