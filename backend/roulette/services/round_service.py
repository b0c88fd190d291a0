"""Bet ledger and resolution engine layered over the round repository."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Any, Iterable, Mapping

from loguru import logger

from roulette.catalogue import CandidateCatalogue
from roulette.core.config import Settings
from roulette.core.errors import (
    CandidateNotFoundError,
    InvalidInputError,
    InvalidStateError,
)
from roulette.domain import (
    Bet,
    BetReceipt,
    OddsQuote,
    RegistryStats,
    Resolution,
    Round,
    RoundResult,
    RoundStatus,
    RoundSummary,
)
from roulette.repositories import RoundRepository

from .odds import compute_odds
from .settlement import CURRENCY_PRECISION, DEFAULT_HOUSE_CUT, compute_payouts, select_winner


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be numeric")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(f"{field_name} must be numeric") from exc
    if not amount.is_finite():
        raise InvalidInputError(f"{field_name} must be finite")
    try:
        amount.quantize(CURRENCY_PRECISION)
    except InvalidOperation as exc:
        raise InvalidInputError(f"{field_name} is out of range") from exc
    return amount


@dataclass(frozen=True, slots=True)
class RoundView:
    """Round snapshot merged with its odds breakdown and remaining time."""

    round: Round
    odds: dict[str, OddsQuote]
    time_remaining: float


class RoundService:
    """Facade used by the API for every round and bet operation."""

    def __init__(
        self,
        repository: RoundRepository,
        catalogue: CandidateCatalogue,
        *,
        house_cut: Decimal = DEFAULT_HOUSE_CUT,
    ) -> None:
        self._repository = repository
        self._catalogue = catalogue
        self._house_cut = house_cut

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        catalogue: CandidateCatalogue | None = None,
        repository: RoundRepository | None = None,
    ) -> "RoundService":
        repository = repository or RoundRepository(
            round_id_bytes=settings.round_id_bytes,
            bet_id_bytes=settings.bet_id_bytes,
            default_duration_seconds=settings.default_round_duration_seconds,
            default_min_bet=Decimal(str(settings.default_min_bet)),
        )
        return cls(
            repository,
            catalogue or CandidateCatalogue(),
            house_cut=Decimal(str(settings.house_cut)),
        )

    @property
    def catalogue(self) -> CandidateCatalogue:
        return self._catalogue

    def candidate_names(self) -> dict[str, str]:
        return {candidate.id: candidate.name for candidate in self._catalogue}

    # ------------------------------------------------------------------
    # Rounds

    def create_round(
        self,
        *,
        duration_seconds: int | None = None,
        min_bet: Any = None,
        candidate_ids: Iterable[str] | None = None,
    ) -> Round:
        candidates = self._catalogue.select(candidate_ids)
        minimum = None if min_bet is None else _to_decimal(min_bet, "minBet")
        return self._repository.create(
            candidates,
            duration_seconds=duration_seconds,
            min_bet=minimum,
        )

    def get_round(self, round_id: str) -> Round:
        return self._repository.get(round_id)

    def round_view(self, round_id: str) -> RoundView:
        snapshot = self._repository.get(round_id)
        return RoundView(
            round=snapshot,
            odds=compute_odds(snapshot),
            time_remaining=snapshot.time_remaining(self._repository.now()),
        )

    def list_open_rounds(self) -> list[RoundSummary]:
        return self._repository.list_open()

    def get_bet(self, bet_id: str) -> Bet:
        return self._repository.get_bet(bet_id)

    def stats(self) -> RegistryStats:
        return self._repository.stats()

    # ------------------------------------------------------------------
    # Ledger

    def place_bet(
        self,
        round_id: str,
        agent_id: str | None,
        candidate_id: str | None,
        amount: Any,
    ) -> BetReceipt:
        with self._repository.lock(round_id) as round_:
            if not round_.is_open:
                raise InvalidStateError("Round not open for betting")
            if not agent_id or not candidate_id or amount in (None, "", 0):
                raise InvalidInputError("agentId, protocolId, and amount required")
            stake = _to_decimal(amount, "amount")
            if stake < round_.min_bet:
                raise InvalidInputError(f"Minimum bet is {round_.min_bet} USDC")
            if candidate_id not in round_.pools:
                raise CandidateNotFoundError(candidate_id)
            try:
                new_pool = round_.pools[candidate_id] + stake
                new_total = round_.total_pool + stake
            except DecimalException as exc:
                raise InvalidInputError("amount is out of range") from exc

            bet = Bet(
                id=self._repository.new_bet_id(),
                round_id=round_.id,
                agent_id=agent_id,
                candidate_id=candidate_id,
                candidate_name=round_.candidate_names.get(candidate_id, candidate_id),
                amount=stake,
                timestamp=self._repository.now(),
            )
            round_.bets.append(bet)
            round_.pools[candidate_id] = new_pool
            round_.total_pool = new_total
            self._repository.record_bet(bet)

            odds = compute_odds(round_)
            total_pool = round_.total_pool

        logger.info(
            "Bet {} placed on round {}: agent={} protocol={} amount={} total_pool={}",
            bet.id,
            round_id,
            agent_id,
            candidate_id,
            stake,
            total_pool,
        )
        return BetReceipt(bet=bet, total_pool=total_pool, odds=odds)

    # ------------------------------------------------------------------
    # Resolution

    def resolve_round(self, round_id: str, outcome_counts: Mapping[str, int]) -> Resolution:
        with self._repository.lock(round_id) as round_:
            if not round_.is_open:
                raise InvalidStateError("Round already resolved")
            counts = self._validate_counts(round_, outcome_counts)

            winner = select_winner(counts)
            payouts = compute_payouts(round_, winner, house_cut=self._house_cut)
            round_.result = RoundResult(
                winner=winner,
                winner_name=round_.candidate_names.get(winner, winner) if winner else None,
                liquidation_counts=counts,
                resolved_at=self._repository.now(),
                payouts=payouts,
            )
            round_.status = RoundStatus.RESOLVED
            snapshot = copy.deepcopy(round_)

        logger.info(
            "Resolved round {}: winner={} liquidations={} winning_bets={} total_pool={}",
            round_id,
            winner,
            counts.get(winner) if winner else 0,
            len(payouts),
            snapshot.total_pool,
        )
        return Resolution(round=snapshot, winner=winner, payouts=payouts)

    @staticmethod
    def _validate_counts(round_: Round, outcome_counts: Mapping[str, int]) -> dict[str, int]:
        if not outcome_counts:
            raise InvalidInputError("liquidationData must report at least one protocol")
        counts: dict[str, int] = {}
        for candidate_id, count in outcome_counts.items():
            if candidate_id not in round_.pools:
                raise CandidateNotFoundError(candidate_id)
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise InvalidInputError(
                    f"Liquidation count for '{candidate_id}' must be a non-negative integer"
                )
            counts[candidate_id] = count
        return counts

    def close(self) -> None:
        self._repository.clear()


__all__ = ["RoundService", "RoundView"]
