from __future__ import annotations

from mockforge.core.config import get_settings
from mockforge.core.errors import ProviderConfigError
from mockforge.providers.llm.fake import FakeLLMProvider
from mockforge.providers.llm.huggingface import HuggingFaceProvider


def get_llm_provider(request_id: str | None = None):
    settings = get_settings()
    provider = (settings.llm_provider or "huggingface").lower()

    if provider == "fake":
        return FakeLLMProvider(response=settings.fake_llm_response)
    if provider == "huggingface":
        return HuggingFaceProvider(request_id=request_id)

    raise ProviderConfigError(f"Unsupported LLM provider: {provider}")
