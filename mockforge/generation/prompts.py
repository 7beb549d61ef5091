from __future__ import annotations

import json


def build_generation_prompt(field_definition: dict[str, str], record_count: int = 10) -> str:
    # Embed the field definition verbatim so the model sees names and types as submitted.
    schema_fields = json.dumps(field_definition, indent=2)
    return (
        "You are a mock data generation expert.\n"
        f"Generate exactly {record_count} diverse, realistic records matching this JSON schema:\n"
        "\n"
        f"{schema_fields}\n"
        "\n"
        "Guidelines:\n"
        "- Respect field data types\n"
        "- Create believable, varied, human-like values\n"
        "- No explanations or markdown\n"
        "- Do not wrap the output in code fences\n"
        "- Return ONLY a valid JSON array of objects\n"
    )
