import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from sitegen.client import (
    ApiError,
    health_check,
    list_websites,
    site_name,
    stream_generation,
    website_url,
)


def _mock_stream_response(chunks, status_code=200, body=None):
    """Context manager stand-in for httpx.stream()."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.iter_bytes.return_value = iter(chunks)
    if body is not None:
        resp.json.return_value = body
        resp.text = json.dumps(body)
    else:
        resp.json.side_effect = ValueError("no json")
        resp.text = ""
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm, resp


def _mock_response(status_code=200, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


# --- stream_generation ---

@patch("sitegen.client.httpx.stream")
def test_stream_generation_posts_request(mock_stream):
    cm, _ = _mock_stream_response([])
    mock_stream.return_value = cm
    request = {"description": "site", "thread_id": "t1"}
    list(stream_generation("http://localhost:8000/", request, timeout=30.0))
    args, kwargs = mock_stream.call_args
    assert args == ("POST", "http://localhost:8000/api/generate-website")
    assert kwargs["json"] == request
    assert kwargs["timeout"] == 30.0


@patch("sitegen.client.httpx.stream")
def test_stream_generation_decodes_split_frames(mock_stream):
    cm, _ = _mock_stream_response([
        b'data: {"status": "running", "pro',
        b'gress": 10}\n\ndata: {"status": "completed", "data": {"pages": {}, "folder_path": "x"}}\n',
    ])
    mock_stream.return_value = cm
    events = list(stream_generation("http://localhost:8000", {"description": "x"}))
    assert [e["status"] for e in events] == ["running", "completed"]


@patch("sitegen.client.httpx.stream")
def test_stream_generation_http_error(mock_stream):
    cm, resp = _mock_stream_response([], status_code=503, body={"detail": "Backend busy"})
    mock_stream.return_value = cm
    with pytest.raises(ApiError, match="status: 503.*Backend busy") as exc_info:
        list(stream_generation("http://localhost:8000", {"description": "x"}))
    assert exc_info.value.status_code == 503
    resp.read.assert_called_once()


@patch("sitegen.client.httpx.stream")
def test_stream_generation_http_error_without_body(mock_stream):
    cm, _ = _mock_stream_response([], status_code=404)
    mock_stream.return_value = cm
    with pytest.raises(ApiError) as exc_info:
        list(stream_generation("http://localhost:8000", {"description": "x"}))
    assert str(exc_info.value) == "HTTP error! status: 404"


@patch("sitegen.client.httpx.stream")
def test_stream_generation_connection_error_propagates(mock_stream):
    mock_stream.side_effect = httpx.ConnectError("Connection refused")
    with pytest.raises(httpx.ConnectError):
        list(stream_generation("http://localhost:8000", {"description": "x"}))


def test_api_error_nested_error_message():
    resp = _mock_response(400, {"error": {"message": "bad description"}})
    resp.text = ""
    from sitegen.client import _check_response
    with pytest.raises(ApiError, match="bad description"):
        _check_response(resp)


# --- list_websites / health_check ---

@patch("sitegen.client.httpx.get")
def test_list_websites_returns_list(mock_get):
    mock_get.return_value = _mock_response(200, {"websites": [{"name": "site_1"}]})
    assert list_websites("http://localhost:8000") == [{"name": "site_1"}]
    assert mock_get.call_args[0][0] == "http://localhost:8000/api/websites"


@patch("sitegen.client.httpx.get")
def test_list_websites_missing_key(mock_get):
    mock_get.return_value = _mock_response(200, {})
    assert list_websites("http://localhost:8000") == []


@patch("sitegen.client.httpx.get")
def test_list_websites_connection_error_returns_empty(mock_get, capsys):
    mock_get.side_effect = httpx.ConnectError("Connection refused")
    assert list_websites("http://localhost:8000") == []
    assert "failed to fetch websites" in capsys.readouterr().err


@patch("sitegen.client.httpx.get")
def test_list_websites_http_error_returns_empty(mock_get):
    resp = _mock_response(500, {"detail": "oops"})
    resp.text = ""
    mock_get.return_value = resp
    assert list_websites("http://localhost:8000") == []


@patch("sitegen.client.httpx.get")
def test_health_check_ok(mock_get):
    mock_get.return_value = _mock_response(200, {"status": "ok"})
    assert health_check("http://localhost:8000") is True
    assert mock_get.call_args[0][0] == "http://localhost:8000/health"


@patch("sitegen.client.httpx.get")
def test_health_check_down(mock_get):
    mock_get.side_effect = httpx.ConnectError("refused")
    assert health_check("http://localhost:8000") is False


@patch("sitegen.client.httpx.get")
def test_health_check_server_error(mock_get):
    mock_get.return_value = _mock_response(500)
    assert health_check("http://localhost:8000") is False


# --- Result resolution ---

@pytest.mark.parametrize("path,expected", [
    ("/out/site_42", "site_42"),
    ("C:\\AIML\\webtemplates\\website_123", "website_123"),
    ("out/site_1/", "site_1"),
    ("C:\\sites\\mixed/site_7", "site_7"),
    ("site_only", "site_only"),
])
def test_site_name(path, expected):
    assert site_name(path) == expected


def test_website_url():
    assert website_url("http://localhost:8000/", "/out/site_42") == (
        "http://localhost:8000/api/serve-website/site_42/index.html"
    )
