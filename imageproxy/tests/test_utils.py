"""Tests for request parsing helpers in :mod:`imageproxy.utils`."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
from imageproxy.config import Settings, get_settings
from imageproxy.schemas import GenerationRequest
from imageproxy.utils import ProxyError, extract_generation_request, parse_body


@pytest.mark.parametrize("body", [None, b"", ""])
def test_empty_body_becomes_empty_object(body) -> None:
    assert parse_body(body) == {}


def test_pre_parsed_body_is_used_as_is() -> None:
    body = {"prompt": "a cat"}

    assert parse_body(body) is body


def test_text_body_is_decoded_as_json() -> None:
    assert parse_body('{"prompt": "a cat", "mimeType": "image/png"}') == {
        "prompt": "a cat",
        "mimeType": "image/png",
    }
    assert parse_body(b'{"prompt": "caf\xc3\xa9"}') == {"prompt": "café"}


@pytest.mark.parametrize("body", [b"{", "not json", b"\xc3\x28", b"[" * 200000])
def test_invalid_json_raises_client_error(body) -> None:
    with pytest.raises(ProxyError) as exc_info:
        parse_body(body)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid JSON payload."


def test_extract_keeps_optional_fields_and_ignores_unknown_ones() -> None:
    request = extract_generation_request(
        {"prompt": "a cat", "base64Image": "AAAA", "mimeType": "image/webp", "seed": 7}
    )

    assert request == GenerationRequest(prompt="a cat", base64Image="AAAA", mimeType="image/webp")


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": 0}, {"prompt": False}, None, ["prompt"]])
def test_extract_requires_truthy_prompt(body) -> None:
    with pytest.raises(ProxyError) as exc_info:
        extract_generation_request(body)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Prompt is required."


@pytest.mark.parametrize("body", [{"prompt": 42}, {"prompt": "a cat", "mimeType": ["image/png"]}])
def test_extract_rejects_wrongly_typed_fields(body) -> None:
    with pytest.raises(ProxyError) as exc_info:
        extract_generation_request(body)

    assert exc_info.value.message == "Invalid request payload."


def test_default_body_limit_is_ten_mebibytes() -> None:
    assert Settings(GEMINI_API_KEY="secret").max_body_bytes == 10 * 1024 * 1024


def test_api_key_is_hidden_and_blank_counts_as_missing() -> None:
    settings = Settings(GEMINI_API_KEY="secret")

    assert settings.api_key == "secret"
    assert "secret" not in repr(settings)
    assert Settings(GEMINI_API_KEY="").api_key is None


def test_settings_follow_environment_changes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "first-key")
    assert get_settings().api_key == "first-key"

    monkeypatch.setenv("GEMINI_API_KEY", "rotated-key")
    assert get_settings().api_key == "rotated-key"
