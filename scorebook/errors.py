class ScoringError(Exception):
    """Base class for every rejection raised by the scoring engine."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ScoringError):
    """A delivery or selection is malformed. The ledger is left unchanged."""


class StateError(ScoringError):
    """The operation is not allowed in the match's current phase."""
