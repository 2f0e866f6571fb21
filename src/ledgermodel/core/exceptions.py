"""
Exceptions raised for programming errors.

Expected failures (validation, persistence) never raise; they are reported
through the success flag and the entity's ErrorBag.
"""


class LedgerModelError(Exception):
    """Base class for ledgermodel errors."""


class AdapterContractError(LedgerModelError, AttributeError):
    """An installed persistence adapter lacks the requested operation."""

    def __init__(self, adapter, operation: str):
        self.adapter = adapter
        self.operation = operation
        super().__init__(
            f"Adapter {adapter.__class__.__name__} does not implement '{operation}'"
        )


__all__ = ["LedgerModelError", "AdapterContractError"]
