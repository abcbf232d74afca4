"""
Configuration Management

Settings for the debug server connection and the tool service, read from
environment variables with defaults.
"""

import os

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class Config:
    """Application configuration."""

    # In-app debug server (telemetry source)
    DEBUG_SERVER_HOST = os.environ.get("IOS_DEBUG_SERVER_HOST", "localhost")
    DEBUG_SERVER_PORT = int(os.environ.get("IOS_DEBUG_SERVER_PORT", "8765"))
    DEBUG_SERVER_TIMEOUT = float(os.environ.get("IOS_DEBUG_SERVER_TIMEOUT", "10"))

    # Rendered tool output
    CHARACTER_LIMIT = int(os.environ.get("CHARACTER_LIMIT", "50000"))

    # Server
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "8000"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "info")

    @classmethod
    def validate(cls):
        """Raise ValueError for settings that cannot work."""
        if not 0 < cls.DEBUG_SERVER_PORT < 65536:
            raise ValueError(f"IOS_DEBUG_SERVER_PORT out of range: {cls.DEBUG_SERVER_PORT}")
        if not 0 < cls.PORT < 65536:
            raise ValueError(f"PORT out of range: {cls.PORT}")
        if cls.DEBUG_SERVER_TIMEOUT <= 0:
            raise ValueError("IOS_DEBUG_SERVER_TIMEOUT must be positive")
        if cls.CHARACTER_LIMIT <= 100:
            raise ValueError("CHARACTER_LIMIT must be greater than 100")
        if cls.LOG_LEVEL.lower() not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {cls.LOG_LEVEL!r}")

