"""
Application configuration loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings

VERSION = "1.0.0"


class Settings(BaseSettings):
    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Base URL used by the client commands (on / off / status / list)
    server_url: str = "http://localhost:8080"

    # Seconds without contact before a device is considered offline
    device_timeout: float = 30.0

    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
