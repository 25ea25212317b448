from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import story_client  # noqa: E402
from story_client import StoryClient, StoryGenerationError  # noqa: E402


class DummyResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        return self._payload


def _client(api_key: str = "test-key") -> StoryClient:
    return StoryClient({"apis": {"deepai": {"api_key": api_key}}})


def test_generate_posts_prompt_and_returns_trimmed_story(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []

    def fake_post(url: str, **kwargs: Any) -> DummyResponse:
        calls.append({"url": url, **kwargs})
        return DummyResponse({"output": "  Once upon a time. The end.\n"})

    monkeypatch.setattr(story_client.requests, "post", fake_post)

    story = _client().generate("  a dog and a ball  ")

    assert story == "Once upon a time. The end."
    assert calls[0]["url"] == StoryClient.BASE_URL
    assert calls[0]["headers"] == {"Api-Key": "test-key"}
    prompt = calls[0]["data"]["text"]
    assert prompt.startswith("Create a funny and educational children's story")
    assert prompt.endswith("\n\na dog and a ball")


def test_service_error_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        story_client.requests,
        "post",
        lambda *args, **kwargs: DummyResponse({"err": "quota exceeded"}, status_code=401),
    )
    with pytest.raises(StoryGenerationError, match="DeepAI error: quota exceeded"):
        _client().generate("text")


def test_transport_error_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*args: Any, **kwargs: Any) -> DummyResponse:
        raise story_client.requests.ConnectionError("offline")

    monkeypatch.setattr(story_client.requests, "post", fake_post)
    with pytest.raises(StoryGenerationError, match="Failed to generate story."):
        _client().generate("text")


def test_missing_output_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(story_client.requests, "post", lambda *args, **kwargs: DummyResponse({"id": "x"}))
    with pytest.raises(StoryGenerationError):
        _client().generate("text")


def test_empty_text_does_not_call_service(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*args: Any, **kwargs: Any) -> DummyResponse:  # pragma: no cover
        raise AssertionError("no request expected")

    monkeypatch.setattr(story_client.requests, "post", fake_post)
    with pytest.raises(StoryGenerationError):
        _client().generate("   ")


def test_api_key_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEEPAI_API_KEY", "env-key")
    assert StoryClient({}).api_key == "env-key"
    assert _client("config-key").api_key == "config-key"
