"""
Domain-layer exceptions.

These indicate caller bugs (programming-contract violations), never bad
input data. Malformed records and references are reported as validation
results instead.
"""


class ContractViolationError(Exception):
    """A caller invoked an operation outside its contract."""

    pass


class UnsupportedRecordKindError(ContractViolationError):
    """A kind-specific parser was handed a record of another kind."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a kind {expected} record, got kind {actual}")
