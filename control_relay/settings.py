from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    WS_PATH: str = "/"
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Logging settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str | None = None
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics"]

    # Relay settings
    WELCOME_MESSAGE: str = "Connected to SageMaker Control Server"
    WS_SEND_QUEUE_SIZE: int = 256
    WS_SEND_TIMEOUT_SECONDS: float = 5.0


app_settings = Settings()
