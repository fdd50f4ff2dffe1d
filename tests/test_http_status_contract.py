# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import Mock, patch

import pytest

from callconf.errors import HttpStatusError
from callconf.networking.client import HttpClient
from callconf.networking.config import HttpClientConfig
from callconf.state import MergedConfig


def _mock_response(
    *,
    content: bytes = b"",
    status: int = 200,
    url: str = "http://example.com",
    reason: str = "OK",
):
    response = Mock()
    response.content = content
    response.status_code = status
    response.url = url
    response.reason = reason
    response.elapsed.total_seconds.return_value = 0.1
    response.headers = {"Content-Type": "application/json"}
    return response


def _config(*segments: str) -> MergedConfig:
    return MergedConfig(
        endpoint_key="test.status",
        base_url="http://example.com",
        url_params=segments,
    )


def test_404_is_ok_result_with_status_metadata():
    client = HttpClient(HttpClientConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=b"not found",
            status=404,
            reason="Not Found",
        )
        result = client.send(_config("missing"))

    assert result.ok
    assert result.value.content == b"not found"
    assert result.value.status_code == 404
    assert not result.value.is_success
    assert result.meta["status_code"] == 404
    assert result.meta["reason"] == "Not Found"


def test_500_is_ok_result_with_status_metadata():
    client = HttpClient(HttpClientConfig(timeout_seconds=5.0))

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(
            content=b"server error",
            status=500,
            reason="Internal Server Error",
        )
        result = client.send(_config("error"))

    assert result.ok
    assert result.value.content == b"server error"
    assert result.meta["status_code"] == 500
    assert result.meta["reason"] == "Internal Server Error"


@pytest.mark.parametrize("status", [404, 500])
def test_raise_for_status_turns_error_status_into_err(status):
    client = HttpClient(
        HttpClientConfig(timeout_seconds=5.0, raise_for_status=True)
    )

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(status=status, reason="Bad")
        result = client.send(_config("error"))

    assert not result.ok
    assert isinstance(result.error, HttpStatusError)
    assert result.error.status_code == status
    assert result.meta["final_error"] == "HttpStatusError"


def test_raise_for_status_keeps_redirect_status_as_ok():
    client = HttpClient(
        HttpClientConfig(timeout_seconds=5.0, raise_for_status=True)
    )

    with patch("requests.Session.request") as mock_request:
        mock_request.return_value = _mock_response(status=302, reason="Found")
        result = client.send(_config("redirect"))

    assert result.ok
    assert result.meta["status_code"] == 302
