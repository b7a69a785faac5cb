"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Processing and server settings."""

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Upload limits
    MAX_FILE_SIZE: int = 100 * 1024 * 1024  # 100 MB
    MAX_DIMENSION: int = 10000  # Max output width/height in pixels

    # Worker pool
    WORKERS: int = 4
    QUEUE_DEPTH: int = 8  # Requests allowed to wait beyond the busy workers
    PROCESSING_TIMEOUT: float = 30.0  # Seconds

    # Encoding
    DEFAULT_OUTPUT_FORMAT: str = "png"

    # Backends
    ENABLE_NATIVE_BACKEND: bool = True

    # Logging, e.g. "INFO". None leaves logging to the host application.
    LOG_LEVEL: Optional[str] = None

    model_config = {"env_prefix": "RASTERFX_"}


settings = Settings()
