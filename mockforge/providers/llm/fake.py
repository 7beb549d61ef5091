from __future__ import annotations

import json


def _default_response(count: int = 10) -> str:
    rows = [{"id": idx, "label": f"sample-{idx}"} for idx in range(1, count + 1)]
    return json.dumps(rows)


class FakeLLMProvider:
    def __init__(self, response: str | None = None) -> None:
        # Deterministic response keeps tests stable without external calls.
        self._response = response if response is not None else _default_response()
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        # Remember prompts so tests can assert on what the model was asked.
        self.prompts.append(prompt)
        return self._response
