from __future__ import annotations

import types

import pytest

from mockforge.core.errors import (
    GenerationFormatError,
    InferenceAuthError,
    InvalidInputError,
    ProviderConfigError,
)
from mockforge.providers.llm.fake import FakeLLMProvider
import scripts.generation_smoke as generation_smoke


@pytest.mark.asyncio
async def test_generation_smoke_prints_record_count(monkeypatch, capsys) -> None:
    provider = FakeLLMProvider(response='[{"username": "ana"}, {"username": "bo"}]')
    monkeypatch.setattr(generation_smoke, "get_llm_provider", lambda request_id=None: provider)

    args = types.SimpleNamespace(field=["username:string"], show_prompt=True)
    assert await generation_smoke._run(args) == 0

    out = capsys.readouterr().out
    assert "records: 2" in out
    assert '"username": "string"' in out
    assert len(provider.prompts) == 1


@pytest.mark.asyncio
async def test_generation_smoke_surfaces_bad_output(monkeypatch) -> None:
    provider = FakeLLMProvider(response="no json here")
    monkeypatch.setattr(generation_smoke, "get_llm_provider", lambda request_id=None: provider)

    args = types.SimpleNamespace(field=["username:string"], show_prompt=False)
    with pytest.raises(GenerationFormatError):
        await generation_smoke._run(args)


def test_generation_smoke_rejects_malformed_fields() -> None:
    with pytest.raises(InvalidInputError):
        generation_smoke._parse_fields(["username"])


@pytest.mark.parametrize(
    ("exc", "code", "label"),
    [
        (InvalidInputError("x"), 2, "INVALID_INPUT"),
        (ProviderConfigError("x"), 2, "PROVIDER_CONFIG_MISSING"),
        (InferenceAuthError("x"), 3, "INFERENCE_AUTH_ERROR"),
        (GenerationFormatError("x"), 5, "GENERATION_FORMAT_ERROR"),
        (RuntimeError("x"), 1, "UNKNOWN_ERROR"),
    ],
)
def test_generation_smoke_error_mapping(exc: Exception, code: int, label: str) -> None:
    mapped_code, message = generation_smoke._format_error(exc)
    assert mapped_code == code
    assert message.startswith(label)
