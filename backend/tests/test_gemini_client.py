"""
Tests for the Gemini HTTP client, using httpx.MockTransport
"""
import json

import httpx
import pytest

from academy.errors import UpstreamEmptyResponse, UpstreamStatusError, UpstreamUnavailable
from academy.gemini_client import GeminiClient

URL = "https://gemini.test/v1beta/models/test:generateContent"


def _client(handler, calls):
    def recording(request):
        calls.append(request)
        return handler(request)

    return GeminiClient("secret-key", base_url=URL, transport=httpx.MockTransport(recording))


def _answer(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


@pytest.mark.asyncio
async def test_returns_first_candidate_text():
    calls = []
    client = _client(lambda request: httpx.Response(200, json=_answer("hello")), calls)
    try:
        assert await client.generate("prompt text") == "hello"
    finally:
        await client.aclose()

    assert len(calls) == 1
    request = calls[0]
    assert request.headers["x-goog-api-key"] == "secret-key"
    assert "secret-key" not in str(request.url)
    body = json.loads(request.content)
    assert body["contents"][0]["parts"][0]["text"] == "prompt text"
    assert set(body["generationConfig"]) == {"temperature", "topP", "maxOutputTokens"}


@pytest.mark.asyncio
async def test_http_error_is_not_retried():
    calls = []
    client = _client(lambda request: httpx.Response(500, text="boom"), calls)
    try:
        with pytest.raises(UpstreamStatusError) as excinfo:
            await client.generate("p")
    finally:
        await client.aclose()
    assert excinfo.value.status_code == 500
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_no_candidates_is_empty_response():
    calls = []
    client = _client(lambda request: httpx.Response(200, json={"candidates": []}), calls)
    try:
        with pytest.raises(UpstreamEmptyResponse) as excinfo:
            await client.generate("p")
    finally:
        await client.aclose()
    assert excinfo.value.finish_reason is None


@pytest.mark.asyncio
async def test_blocked_candidate_reports_finish_reason():
    calls = []
    blocked = {"candidates": [{"finishReason": "SAFETY"}]}
    client = _client(lambda request: httpx.Response(200, json=blocked), calls)
    try:
        with pytest.raises(UpstreamEmptyResponse) as excinfo:
            await client.generate("p")
    finally:
        await client.aclose()
    assert excinfo.value.finish_reason == "SAFETY"
    assert "SAFETY" in str(excinfo.value)


@pytest.mark.asyncio
async def test_non_json_body_is_empty_response():
    calls = []
    client = _client(lambda request: httpx.Response(200, text="<html>gateway</html>"), calls)
    try:
        with pytest.raises(UpstreamEmptyResponse):
            await client.generate("p")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_connection_error_is_upstream_unavailable():
    calls = []

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(refuse, calls)
    try:
        with pytest.raises(UpstreamUnavailable):
            await client.generate("p")
    finally:
        await client.aclose()
    assert len(calls) == 1


def test_missing_key_is_rejected(monkeypatch):
    from academy.settings import settings

    monkeypatch.setattr(settings, "gemini_api_key", None)
    with pytest.raises(ValueError):
        GeminiClient()
