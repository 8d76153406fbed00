"""
Exception taxonomy for the ledger view.

Missing entities are NOT errors: lookups return zero-valued records.
Only arithmetic that cannot be represented and failures of the external
oracle surface as exceptions.
"""


class SimLedgerError(Exception):
    """Base class for all simledger errors."""


class AmountOverflowError(SimLedgerError, OverflowError):
    """Raised when a computed amount does not fit its fixed-width type."""

    def __init__(self, value: int, width: str):
        self.value = value
        self.width = width
        super().__init__(f"Amount {value} does not fit in {width}")


class OracleError(SimLedgerError):
    """Raised when the external oracle cannot answer a query."""

    def __init__(self, message: str, code: int = -1, original: Exception | None = None):
        self.message = message
        self.code = code
        self.original = original
        super().__init__(f"Oracle error {code}: {message}" if code != -1 else f"Oracle error: {message}")


class UnmappedIdError(OracleError):
    """Raised when an id has no symbol configured on the oracle side."""

    def __init__(self, kind: str, ident: int):
        self.kind = kind
        self.ident = ident
        super().__init__(f"No {kind} symbol configured for id {ident}")


class OracleUnavailableError(OracleError):
    """Raised by the offline oracle for every query."""

    def __init__(self, fact: str):
        self.fact = fact
        super().__init__(f"No oracle configured; '{fact}' has no local override")
