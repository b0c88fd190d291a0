"""In-memory storage for rounds and their bets."""

from .round_repository import MAX_ROUND_DURATION_SECONDS, RoundRepository, utcnow

__all__ = ["MAX_ROUND_DURATION_SECONDS", "RoundRepository", "utcnow"]
