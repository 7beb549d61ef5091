from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from mockforge.core.config import get_settings
from mockforge.core.errors import InferenceAuthError, InferenceError, ProviderConfigError

logger = logging.getLogger(__name__)


class HuggingFaceProvider:
    def __init__(self, client: httpx.AsyncClient | None = None, request_id: str | None = None) -> None:
        self._settings = get_settings()
        self._client = client
        self._request_id = request_id

    def _endpoint(self) -> str:
        base = self._settings.huggingface_base_url.rstrip("/")
        return f"{base}/{self._settings.huggingface_model}"

    @staticmethod
    def _extract_text(body: Any) -> str:
        # The text-generation task answers with [{"generated_text": ...}].
        if isinstance(body, list) and body and isinstance(body[0], dict):
            text = body[0].get("generated_text")
            if isinstance(text, str):
                return text
        if isinstance(body, dict):
            if isinstance(body.get("generated_text"), str):
                return body["generated_text"]
            if body.get("error"):
                raise InferenceError(f"Hugging Face inference error: {body['error']}")
        raise InferenceError("Hugging Face inference returned an unexpected payload")

    async def _post(self, payload: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._endpoint(), json=payload, headers=headers)
        # Own the client for a single call so nothing outlives the request.
        timeout_s = self._settings.ext_call_timeout_ms / 1000.0
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            return await client.post(self._endpoint(), json=payload, headers=headers)

    async def complete(self, prompt: str) -> str:
        api_key = self._settings.huggingface_api_key
        if not api_key:
            raise ProviderConfigError("Missing HUGGINGFACE_API_KEY")

        payload = {
            "inputs": prompt,
            "parameters": {
                "temperature": self._settings.generation_temperature,
                "max_new_tokens": self._settings.generation_max_new_tokens,
                "return_full_text": False,
            },
        }
        headers = {"Authorization": f"Bearer {api_key}"}
        start = time.monotonic()
        logger.info(
            "hf_inference_start request_id=%s model=%s",
            self._request_id,
            self._settings.huggingface_model,
        )
        try:
            response = await self._post(payload, headers)
        except httpx.HTTPError as exc:
            logger.error("hf_inference_error request_id=%s error=%s", self._request_id, type(exc).__name__)
            raise InferenceError("Hugging Face inference request failed.") from exc

        latency_ms = (time.monotonic() - start) * 1000.0
        if response.status_code in {401, 403}:
            logger.warning("hf_inference_auth_error request_id=%s", self._request_id)
            raise InferenceAuthError("Hugging Face auth error: check HUGGINGFACE_API_KEY.")
        if response.status_code >= 400:
            logger.error(
                "hf_inference_error request_id=%s status=%s latency_ms=%.1f",
                self._request_id,
                response.status_code,
                latency_ms,
            )
            error = InferenceError(f"Hugging Face inference error: {response.status_code}")
            setattr(error, "status_code", response.status_code)
            raise error

        try:
            body = response.json()
        except ValueError as exc:
            raise InferenceError("Hugging Face inference returned non-JSON body") from exc
        logger.info("hf_inference_done request_id=%s latency_ms=%.1f", self._request_id, latency_ms)
        return self._extract_text(body)
