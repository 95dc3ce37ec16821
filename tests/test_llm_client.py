"""Tests for the OpenAI text-generation wrapper (no network)."""

import asyncio
from types import SimpleNamespace

import pytest

from cv_optimizer.exceptions import UpstreamUnavailable
from cv_optimizer.llm_client import LLMClient, get_client


def _response(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )


class _Completions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


class _AsyncCompletions(_Completions):
    async def create(self, **kwargs):
        return super().create(**kwargs)


def _stub(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


@pytest.fixture
def client():
    return LLMClient(api_key="test-key", model="test-model", max_completion_tokens=123)


@pytest.mark.unit
def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(ValueError):
        LLMClient()


@pytest.mark.unit
def test_get_client_passes_settings():
    llm = get_client(api_key="k", model="m", max_completion_tokens=42)

    assert llm.model == "m"
    assert llm.max_completion_tokens == 42


@pytest.mark.unit
def test_generate_returns_text(client):
    completions = _Completions(result=_response('{"ok": true}'))
    client.client = _stub(completions)

    assert client.generate("prompt text") == '{"ok": true}'

    request = completions.calls[0]
    assert request["model"] == "test-model"
    assert request["max_completion_tokens"] == 123
    assert request["messages"] == [{"role": "user", "content": "prompt text"}]
    assert request["response_format"] == {"type": "json_object"}


@pytest.mark.unit
def test_generate_empty_content_returns_empty_string(client):
    client.client = _stub(_Completions(result=_response(None)))

    assert client.generate("prompt") == ""


@pytest.mark.unit
def test_generate_failure_is_upstream_unavailable(client):
    completions = _Completions(error=ConnectionError("network down"))
    client.client = _stub(completions)

    with pytest.raises(UpstreamUnavailable) as excinfo:
        client.generate("prompt")

    # Called once, no retries; diagnostic is chained, not in the message
    assert len(completions.calls) == 1
    assert "network down" not in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, ConnectionError)


@pytest.mark.unit
def test_generate_async(client):
    client.async_client = _stub(_AsyncCompletions(result=_response("reply")))

    assert asyncio.run(client.generate_async("prompt")) == "reply"


@pytest.mark.unit
def test_generate_async_failure(client):
    client.async_client = _stub(_AsyncCompletions(error=RuntimeError("503")))

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(client.generate_async("prompt"))
