"""Pari-mutuel odds derived from a round's pool snapshot."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from roulette.domain import OddsQuote, Round

ODDS_PRECISION = Decimal("0.01")
PROBABILITY_PRECISION = Decimal("0.1")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def compute_odds(round_: Round) -> dict[str, OddsQuote]:
    """Return the decimal odds and implied probability for every candidate.

    Odds are ``total_pool / pool`` before the house cut and are ``None`` for a
    candidate nobody has backed yet. Probability is expressed in percent and is
    exactly zero while the round has no stake at all.
    """

    total = round_.total_pool
    quotes: dict[str, OddsQuote] = {}
    for candidate_id, pool in round_.pools.items():
        odds = (total / pool).quantize(ODDS_PRECISION, rounding=ROUND_HALF_UP) if pool > 0 else None
        if total > 0:
            probability = (pool / total * _HUNDRED).quantize(
                PROBABILITY_PRECISION, rounding=ROUND_HALF_UP
            )
        else:
            probability = _ZERO
        quotes[candidate_id] = OddsQuote(pool=pool, odds=odds, probability=probability)
    return quotes


__all__ = ["compute_odds"]
