from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "h4x-image-editor"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    cors_origins: list[str] = ["*"]

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash-image"
    download_prefix: str = "h4x_edit_"
    accepted_mime_types: list[str] = ["image/png", "image/jpeg", "image/webp"]


settings = Settings()
