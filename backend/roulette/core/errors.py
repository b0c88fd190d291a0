"""Error taxonomy shared by the ledger, the settlement engine and the API."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for failures reported back to the caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError, LookupError):
    """Raised when a round, bet or candidate does not exist."""

    status_code = 404


class RoundNotFoundError(NotFoundError):
    def __init__(self, round_id: str) -> None:
        super().__init__("Round not found")
        self.round_id = round_id


class BetNotFoundError(NotFoundError):
    def __init__(self, bet_id: str) -> None:
        super().__init__("Bet not found")
        self.bet_id = bet_id


class CandidateNotFoundError(NotFoundError):
    def __init__(self, candidate_id: str) -> None:
        super().__init__(f"Protocol not found: {candidate_id}")
        self.candidate_id = candidate_id


class InvalidInputError(LedgerError, ValueError):
    """Raised for missing fields or stakes below the round minimum."""

    status_code = 400


class InvalidStateError(LedgerError):
    """Raised when an operation is illegal in the round's current status."""

    status_code = 400


class InternalError(LedgerError):
    """Raised when an external collaborator fails."""

    status_code = 500


class NarrativeUnavailableError(InternalError):
    """Raised when narrative generation times out or the provider errors."""


__all__ = [
    "BetNotFoundError",
    "CandidateNotFoundError",
    "InternalError",
    "InvalidInputError",
    "InvalidStateError",
    "LedgerError",
    "NarrativeUnavailableError",
    "NotFoundError",
    "RoundNotFoundError",
]
