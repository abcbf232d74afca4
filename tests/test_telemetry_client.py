from unittest import mock

import pytest
import requests

from telemetry_client import DebugServerClient, TelemetryCategory


def _response(status_code=200, reason="OK", payload=None, json_error=None):
    response = mock.Mock()
    response.status_code = status_code
    response.reason = reason
    response.ok = status_code < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return DebugServerClient(host="127.0.0.1", port=9999, timeout=2.5, session=session)


def test_successful_request(client, session):
    session.get.return_value = _response(payload=[{"viewId": "a"}])

    result = client.request(TelemetryCategory.TOUCH_TARGETS)

    assert result.success
    assert result.data == [{"viewId": "a"}]
    session.get.assert_called_once_with(
        "http://127.0.0.1:9999/audit/touch-targets",
        headers={"Content-Type": "application/json"},
        timeout=2.5
    )


def test_http_error_is_reported(client, session):
    session.get.return_value = _response(status_code=404, reason="Not Found")

    result = client.request(TelemetryCategory.LAYOUT)

    assert not result.success
    assert result.error == "HTTP 404: Not Found"


def test_connection_error_is_reported(client, session):
    session.get.side_effect = requests.exceptions.ConnectionError("refused")

    result = client.request(TelemetryCategory.CONTRAST)

    assert not result.success
    assert result.error.startswith("Failed to connect to debug server: refused")


def test_timeout_is_reported(client, session):
    session.get.side_effect = requests.exceptions.Timeout("read timed out")

    result = client.request(TelemetryCategory.INTERACTIVE_ELEMENTS)

    assert not result.success
    assert "read timed out" in result.error


def test_invalid_json_is_reported(client, session):
    session.get.return_value = _response(json_error=ValueError("Expecting value"))

    result = client.request(TelemetryCategory.CONTRAST)

    assert not result.success
    assert result.error.startswith("Invalid JSON from debug server")


def test_ping(client, session):
    session.get.return_value = _response(payload={"status": "ok"})
    assert client.ping()

    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    assert not client.ping()


def test_close_releases_own_session():
    client = DebugServerClient()
    with mock.patch.object(client.session, "close") as close:
        client.close()
    close.assert_called_once_with()


def test_close_leaves_injected_session_open(client, session):
    client.close()
    session.close.assert_not_called()
