from unittest.mock import Mock

import pytest
import requests

from studio.generate import ModelParams, ProviderError, ProviderTimeout
from studio.generate.clients.gemini_client import GeminiClient


def _response(status=200, body=None, headers=None, text=""):
    resp = Mock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.text = text
    resp.json.return_value = body if body is not None else {}
    return resp


def _client(session):
    return GeminiClient(api_key="test-key", model="models/gemini-2.0-flash", session=session, timeout=5)


def test_generate_joins_candidate_parts():
    session = Mock()
    session.post.return_value = _response(body={
        "candidates": [{"content": {"parts": [{"text": "Hello"}, {"text": " world"}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 3},
    })
    text, meta = _client(session).generate("hi", ModelParams(temperature=0.2, max_tokens=50))

    assert text == "Hello world"
    assert meta["finish_reason"] == "STOP"
    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url.endswith("/models/gemini-2.0-flash:generateContent")
    assert kwargs["headers"]["x-goog-api-key"] == "test-key"
    assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "hi"
    assert kwargs["json"]["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 50}
    assert kwargs["timeout"] == 5


def test_http_error_maps_to_retryable_provider_error():
    session = Mock()
    session.post.return_value = _response(status=429, headers={"Retry-After": "2"}, text="quota")
    with pytest.raises(ProviderError) as info:
        _client(session).generate("hi", ModelParams())
    assert info.value.status_code == 429
    assert info.value.is_retryable is True
    assert info.value.retry_after == 2.0


def test_bad_request_is_not_retryable():
    session = Mock()
    session.post.return_value = _response(status=400, text="bad")
    with pytest.raises(ProviderError) as info:
        _client(session).generate("hi", ModelParams())
    assert info.value.is_retryable is False


def test_timeout_maps_to_provider_timeout():
    session = Mock()
    session.post.side_effect = requests.Timeout("read timed out")
    with pytest.raises(ProviderTimeout):
        _client(session).generate("hi", ModelParams())


def test_blocked_prompt_is_reported():
    session = Mock()
    session.post.return_value = _response(body={"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(ProviderError, match="SAFETY"):
        _client(session).generate("hi", ModelParams())


def test_api_key_is_required():
    with pytest.raises(ValueError):
        GeminiClient(api_key="")
