from __future__ import annotations

import argparse
import asyncio
import json
import sys

from mockforge.core.config import get_settings
from mockforge.core.errors import (
    GenerationEmptyError,
    GenerationFormatError,
    InferenceAuthError,
    InferenceError,
    InvalidInputError,
    ProviderConfigError,
)
from mockforge.generation.parsing import check_conformance, parse_generated_records
from mockforge.generation.prompts import build_generation_prompt
from mockforge.providers.llm.factory import get_llm_provider
from mockforge.services.schemas import normalize_field_definition


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate sample records for a field list without touching the database."
    )
    parser.add_argument(
        "--field",
        action="append",
        required=True,
        metavar="NAME:TYPE",
        help="Field definition, repeatable (e.g. --field username:string)",
    )
    parser.add_argument("--show-prompt", action="store_true", help="Print the rendered prompt")
    return parser


def _parse_fields(values: list[str]) -> dict[str, str]:
    raw: dict[str, str] = {}
    for value in values:
        name, sep, type_tag = value.partition(":")
        if not sep:
            raise InvalidInputError(f"Expected NAME:TYPE, got {value!r}")
        raw[name] = type_tag
    return normalize_field_definition(raw)


def _format_error(exc: Exception) -> tuple[int, str]:
    # Map known generation failures to stable, actionable messages.
    if isinstance(exc, InvalidInputError):
        return 2, f"INVALID_INPUT: {exc}"
    if isinstance(exc, ProviderConfigError):
        return 2, f"PROVIDER_CONFIG_MISSING: {exc}"
    if isinstance(exc, InferenceAuthError):
        return 3, f"INFERENCE_AUTH_ERROR: {exc}"
    if isinstance(exc, InferenceError):
        return 4, f"INFERENCE_ERROR: {exc}"
    if isinstance(exc, GenerationFormatError):
        return 5, f"GENERATION_FORMAT_ERROR: {exc}"
    if isinstance(exc, GenerationEmptyError):
        return 5, f"GENERATION_EMPTY: {exc}"
    return 1, f"UNKNOWN_ERROR: {exc}"


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    fields = _parse_fields(args.field)
    prompt = build_generation_prompt(fields, settings.generation_record_count)
    if args.show_prompt:
        print(prompt)

    provider = get_llm_provider(request_id="generation-smoke")
    raw_text = (await provider.complete(prompt)).strip()
    records = parse_generated_records(raw_text)
    if settings.generation_strict_conformance:
        check_conformance(records, fields, raw_text=raw_text)

    print(f"records: {len(records)}")
    print(json.dumps(records[0], indent=2))
    return 0


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()
    try:
        return asyncio.run(_run(args))
    except Exception as exc:  # noqa: BLE001 - surface actionable errors
        code, message = _format_error(exc)
        print(message, file=sys.stderr)
        return code


if __name__ == "__main__":
    raise SystemExit(main())
