"""Winner selection and payout computation for resolved rounds."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from roulette.domain import Payout, Round

CURRENCY_PRECISION = Decimal("0.01")
DEFAULT_HOUSE_CUT = Decimal("0.05")


def select_winner(outcome_counts: Mapping[str, int]) -> str | None:
    """Return the candidate with the most liquidations.

    Ties go to the lexicographically smallest candidate id so the outcome does
    not depend on the order of the report. A report where nobody recorded a
    liquidation has no winner.
    """

    best_count = 0
    winner: str | None = None
    for candidate_id in sorted(outcome_counts):
        count = outcome_counts[candidate_id]
        if count > best_count:
            best_count = count
            winner = candidate_id
    return winner


def distributable_pool(total_pool: Decimal, house_cut: Decimal = DEFAULT_HOUSE_CUT) -> Decimal:
    return total_pool * (Decimal("1") - house_cut)


def compute_payouts(
    round_: Round,
    winner: str | None,
    *,
    house_cut: Decimal = DEFAULT_HOUSE_CUT,
) -> tuple[Payout, ...]:
    """Split the pool, net of the house cut, across bets on ``winner``.

    Each payout is rounded half-up to cents, so the sum may exceed the
    distributable pool by at most half a cent per winning bet.
    """

    if winner is None:
        return ()
    winning_pool = round_.pools.get(winner, Decimal("0"))
    if winning_pool <= 0:
        return ()

    pot = distributable_pool(round_.total_pool, house_cut)
    payouts: list[Payout] = []
    for bet in round_.bets:
        if bet.candidate_id != winner:
            continue
        amount = (bet.amount / winning_pool * pot).quantize(
            CURRENCY_PRECISION, rounding=ROUND_HALF_UP
        )
        payouts.append(Payout(bet_id=bet.id, agent_id=bet.agent_id, bet=bet.amount, payout=amount))
    return tuple(payouts)


__all__ = [
    "CURRENCY_PRECISION",
    "DEFAULT_HOUSE_CUT",
    "compute_payouts",
    "distributable_pool",
    "select_winner",
]
