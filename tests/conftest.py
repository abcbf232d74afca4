import pytest

from telemetry_client import TelemetryCategory, TelemetryResponse


class FakeTelemetryClient:
    """In-memory telemetry source; unknown categories fail like an unreachable server"""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requested = []
        self.close_count = 0

    def request(self, category):
        self.requested.append(category)
        response = self.responses.get(category)
        if response is None:
            return TelemetryResponse(success=False, error="Failed to connect to debug server: connection refused")
        if isinstance(response, Exception):
            raise response
        return response

    def ping(self):
        return TelemetryCategory.PING in self.responses

    def close(self):
        self.close_count += 1


def ok(data):
    return TelemetryResponse(success=True, data=data)


def failed(error):
    return TelemetryResponse(success=False, error=error)


@pytest.fixture
def interactive_elements():
    return [
        {"viewId": "btn1", "type": "UIButton", "label": "", "frame": {"x": 10, "y": 20, "width": 30, "height": 30}},
        {"viewId": "container", "type": "UIView", "frame": {"x": 0, "y": 0, "width": 320, "height": 480}},
        {"viewId": "save", "type": "UIButton", "label": "Save", "frame": {"x": 100, "y": 400, "width": 88, "height": 44}},
    ]


@pytest.fixture
def touch_targets():
    return [
        {"viewId": "btn1", "frame": {"x": 10, "y": 20, "width": 30, "height": 30}, "meetsMinimum": False},
        {"viewId": "close", "accessibilityLabel": "Close", "frame": {"x": 290, "y": 8, "width": 20, "height": 50}},
        {"viewId": "save", "accessibilityLabel": "Save", "frame": {"x": 100, "y": 400, "width": 88, "height": 44}},
    ]


@pytest.fixture
def contrast_samples():
    return [
        {
            "viewId": "caption",
            "foregroundColor": {"hex": "#999999"},
            "backgroundColor": {"hex": "#FFFFFF"},
            "contrastRatio": 2.85,
            "text": "Terms and conditions apply to all orders",
            "fontSize": 12,
        },
        {
            "viewId": "body",
            "foregroundColor": {"hex": "#595959"},
            "backgroundColor": {"hex": "#FFFFFF"},
            "contrastRatio": 7.0,
            "text": "Welcome back",
            "fontSize": 17,
        },
        {
            "viewId": "subtitle",
            "foregroundColor": {"hex": "#767676"},
            "backgroundColor": {"hex": "#FFFFFF"},
            "contrastRatio": 4.54,
            "fontSize": 15,
        },
    ]


@pytest.fixture
def layout_issues():
    return [
        {
            "viewId": "header",
            "issue": "Ambiguous horizontal position",
            "hasAmbiguousLayout": True,
            "translatesAutoresizingMaskIntoConstraints": False,
        },
    ]


@pytest.fixture
def healthy_client(interactive_elements, touch_targets, contrast_samples, layout_issues):
    return FakeTelemetryClient({
        TelemetryCategory.INTERACTIVE_ELEMENTS: ok(interactive_elements),
        TelemetryCategory.TOUCH_TARGETS: ok(touch_targets),
        TelemetryCategory.CONTRAST: ok(contrast_samples),
        TelemetryCategory.LAYOUT: ok(layout_issues),
        TelemetryCategory.PING: ok({"status": "ok"}),
    })
