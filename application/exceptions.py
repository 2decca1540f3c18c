"""
Application-layer exceptions.

These exceptions are used across application and infrastructure layers.

Taxonomy:
- Syntax / schema / not-found outcomes are never raised; they are returned
  as diagnostics or omitted items.
- ProviderError (and ProviderTimeoutError) means a fetch outcome is unknown
  and is always surfaced to the caller, never turned into an empty result.
- ContractViolationError and its subclasses indicate a caller bug.
"""

from domain.exceptions import ContractViolationError, UnsupportedRecordKindError


class RecordResolutionError(Exception):
    """Base class for errors raised while resolving records."""

    pass


class ProviderError(RecordResolutionError):
    """The record provider failed (transport error, gateway error).

    The batch outcome is unknown; callers may retry, possibly with a
    different cache strategy.
    """

    pass


class ProviderTimeoutError(ProviderError):
    """A fetch exceeded its hard timeout.

    Distinct from an empty-but-successful fetch.
    """

    def __init__(self, timeout_ms: int, strategy: str = ""):
        self.timeout_ms = timeout_ms
        self.strategy = strategy
        detail = f" using {strategy}" if strategy else ""
        super().__init__(f"Record fetch timed out after {timeout_ms}ms{detail}")


class ReferenceKindMismatchError(ContractViolationError):
    """A resolve operation for one kind was handed a reference of another kind."""

    def __init__(self, reference: str, expected: int):
        self.reference = reference
        self.expected = expected
        super().__init__(f"Expected a kind {expected} reference, got {reference}")


class InvalidReferenceError(ContractViolationError):
    """A single-reference operation was handed a malformed reference."""

    def __init__(self, reference: str, errors):
        self.reference = reference
        self.errors = list(errors)
        super().__init__(f"Invalid reference {reference!r}: {'; '.join(self.errors)}")


class TemplateOwnershipError(ContractViolationError):
    """A template update was attempted by someone other than its author."""

    def __init__(self, template_ref: str, authority: str):
        self.template_ref = template_ref
        self.authority = authority
        super().__init__(f"{authority[:8]} does not own template {template_ref}")


__all__ = [
    "RecordResolutionError",
    "ProviderError",
    "ProviderTimeoutError",
    "ContractViolationError",
    "ReferenceKindMismatchError",
    "InvalidReferenceError",
    "TemplateOwnershipError",
    "UnsupportedRecordKindError",
]
