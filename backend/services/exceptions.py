"""Typed exception hierarchy for ledger operations.

Services raise these; the API layer maps them onto HTTP status codes
(see ``api.helpers.http_error``).
"""


class LedgerError(Exception):
    """Base exception for all ledger service errors."""

    pass


class NotFoundError(LedgerError, LookupError):
    """Account, holding, lot, budget or transaction is absent or not owned by the caller."""

    def __init__(self, entity: str, entity_id: str = ""):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found" + (f": {entity_id}" if entity_id else ""))


class LedgerValidationError(LedgerError, ValueError):
    """Malformed or out-of-range input that passed schema validation."""

    pass


class InsufficientQuantityError(LedgerValidationError):
    """A disposal asks for more than the holding's lots contain."""

    def __init__(self, requested, available):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot dispose {requested}: only {available} available"
        )


class ConflictError(LedgerError):
    """A concurrent writer kept winning the optimistic-concurrency race."""

    def __init__(self, message: str, attempts: int = 0):
        self.attempts = attempts
        super().__init__(message)
