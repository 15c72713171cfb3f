"""
PURPOSE: Configuration settings for the hookrelay webhook server.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files. All settings are validated and typed.
"""

from pydantic_settings import BaseSettings

from .constants import DEFAULT_MAX_BODY_BYTES, MAX_CAPACITY


class Settings(BaseSettings):
    """
    PURPOSE: Central configuration class for hookrelay.

    Manages server binding, message buffer sizing, subscriber backpressure,
    CORS and the Binance futures proxy credentials. Settings are loaded from
    environment variables and .env file.
    """

    # System Settings
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server Binding
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Message Buffer & Fan-out
    MAX_MESSAGES: int = MAX_CAPACITY
    # Notifications a subscriber may have queued before it is dropped
    SUBSCRIBER_QUEUE_SIZE: int = 256

    # Largest accepted webhook body; bigger requests get HTTP 413
    MAX_BODY_BYTES: int = DEFAULT_MAX_BODY_BYTES

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Binance USDS-M Futures proxy
    BINANCE_API_KEY: str = ""
    BINANCE_API_SECRET: str = ""
    BINANCE_BASE_URL: str = "https://fapi.binance.com"
    BINANCE_RECV_WINDOW: int = 5000
    BINANCE_TIMEOUT: float = 10.0
    EXCHANGE_RATE_LIMIT: str = "60/minute"

    def is_production(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in production mode.

        Returns:
            bool: True when APP_ENV indicates production.
        """
        return self.APP_ENV.strip().lower() in {"prod", "production"}

    def is_development(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in development mode.

        Returns:
            bool: True when APP_ENV indicates development or debug is on.
        """
        return self.APP_ENV.strip().lower() in {"dev", "development"} or self.DEBUG

    def has_binance_credentials(self) -> bool:
        """
        PURPOSE: Report whether both Binance API key and secret are configured.

        CALLED BY: Binance proxy routes before issuing signed requests.

        Returns:
            bool: True when key and secret are both non-blank.
        """
        return bool(self.BINANCE_API_KEY.strip() and self.BINANCE_API_SECRET.strip())

    class Config:
        """Pydantic model configuration."""

        env_file: str = ".env"
        env_file_encoding: str = "utf-8"
        case_sensitive: bool = True


settings: Settings = Settings()
