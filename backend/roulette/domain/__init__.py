"""Domain models for rounds, bets and settlement results."""

from .models import (
    Bet,
    BetReceipt,
    Candidate,
    OddsQuote,
    Payout,
    RegistryStats,
    Resolution,
    Round,
    RoundResult,
    RoundStatus,
    RoundSummary,
)

__all__ = [
    "Bet",
    "BetReceipt",
    "Candidate",
    "OddsQuote",
    "Payout",
    "RegistryStats",
    "Resolution",
    "Round",
    "RoundResult",
    "RoundStatus",
    "RoundSummary",
]
