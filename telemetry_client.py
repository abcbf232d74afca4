import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import requests

from config import Config


class TelemetryCategory(str, Enum):
    """Debug-server query categories and the endpoints that serve them"""
    INTERACTIVE_ELEMENTS = "/interactive"
    TOUCH_TARGETS = "/audit/touch-targets"
    CONTRAST = "/audit/contrast"
    LAYOUT = "/audit/layout"
    PING = "/ping"


@dataclass
class TelemetryResponse:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class DebugServerClient:
    def __init__(self, host: str = Config.DEBUG_SERVER_HOST, port: int = Config.DEBUG_SERVER_PORT,
                 timeout: float = Config.DEBUG_SERVER_TIMEOUT, session: Optional[requests.Session] = None):
        """
        Client for the introspection server running inside the app under test

        Args:
            host: Debug server host
            port: Debug server port
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.logger = logging.getLogger(__name__)
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def request(self, category: TelemetryCategory) -> TelemetryResponse:
        """Fetch one category snapshot. Failures are returned, never raised."""
        url = f"{self.base_url}{category.value}"
        try:
            response = self.session.get(url, headers={'Content-Type': 'application/json'},
                                        timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Debug server request to {url} failed: {str(e)}")
            return TelemetryResponse(
                success=False,
                error=f"Failed to connect to debug server: {e}. Make sure the debug server is running in your app."
            )

        if not response.ok:
            return TelemetryResponse(success=False, error=f"HTTP {response.status_code}: {response.reason}")

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(f"Debug server returned invalid JSON from {url}: {str(e)}")
            return TelemetryResponse(success=False, error=f"Invalid JSON from debug server: {e}")

        return TelemetryResponse(success=True, data=data)

    def ping(self) -> bool:
        """Check if the debug server is running"""
        return self.request(TelemetryCategory.PING).success

    def close(self) -> None:
        """Release pooled connections of a session this client created"""
        if self._owns_session:
            self.session.close()
