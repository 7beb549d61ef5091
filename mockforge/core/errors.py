from __future__ import annotations


class MockForgeError(Exception):
    """Base error for mockforge."""


class UnauthorizedError(MockForgeError):
    """Missing or invalid requester identity."""


class InvalidInputError(MockForgeError):
    """Malformed request body or parameters."""


class SchemaNotFoundError(MockForgeError):
    """Schema absent or not owned by the requester."""


class RecordNotFoundError(MockForgeError):
    """Record absent or attached to a different schema."""


class ProviderConfigError(MockForgeError):
    """Missing or invalid inference provider configuration."""


class InferenceAuthError(MockForgeError):
    """Inference provider rejected the configured credential."""


class InferenceError(MockForgeError):
    """Inference request failure."""


class GenerationFormatError(MockForgeError):
    """Model output could not be decoded as JSON."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        # Keep the raw completion around for diagnostics.
        self.raw_text = raw_text


class GenerationEmptyError(MockForgeError):
    """Model output decoded but is not a non-empty array."""


class GenerationConformanceError(GenerationFormatError):
    """Generated record does not match the declared field definition."""


class PersistenceError(MockForgeError):
    """Database layer failure."""
