class AuditError(Exception):
    """Base class for errors surfaced to tool callers"""


class TelemetryUnavailableError(AuditError):
    """A single-category audit could not obtain usable telemetry"""

    def __init__(self, category: str, reason: str):
        super().__init__(reason)
        self.category = category
        self.reason = reason


class UnknownToolError(AuditError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name
