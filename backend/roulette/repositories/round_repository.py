"""Round registry: the single mutable store for rounds and bets."""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from loguru import logger

from roulette.core.errors import BetNotFoundError, InvalidInputError, RoundNotFoundError
from roulette.domain import Bet, Candidate, RegistryStats, Round, RoundStatus, RoundSummary
from roulette.services.ids import IdGenerator, TokenIdGenerator


MAX_ROUND_DURATION_SECONDS = 366 * 24 * 3600


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoundRepository:
    """Own every round, the per-round locks and the global bet index.

    Mutations of a round must happen inside :meth:`lock`; the registry lock
    only protects the dictionaries themselves so different rounds never
    contend with each other.
    """

    def __init__(
        self,
        *,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] = utcnow,
        round_id_bytes: int = 6,
        bet_id_bytes: int = 4,
        default_duration_seconds: int = 3600,
        default_min_bet: Decimal = Decimal("5"),
    ) -> None:
        self._ids = id_generator or TokenIdGenerator()
        self._clock = clock
        self._round_id_bytes = round_id_bytes
        self._bet_id_bytes = bet_id_bytes
        self._default_duration_seconds = default_duration_seconds
        self._default_min_bet = default_min_bet
        self._registry_lock = threading.Lock()
        self._rounds: dict[str, Round] = {}
        self._round_locks: dict[str, threading.Lock] = {}
        self._bets: dict[str, Bet] = {}

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Mutations

    def create(
        self,
        candidates: Sequence[Candidate],
        *,
        duration_seconds: int | None = None,
        min_bet: Decimal | None = None,
    ) -> Round:
        duration = self._default_duration_seconds if duration_seconds is None else duration_seconds
        minimum = self._default_min_bet if min_bet is None else Decimal(min_bet)
        if duration <= 0:
            raise InvalidInputError("duration must be a positive number of seconds")
        if duration > MAX_ROUND_DURATION_SECONDS:
            raise InvalidInputError(
                f"duration must not exceed {MAX_ROUND_DURATION_SECONDS} seconds"
            )
        if minimum <= 0:
            raise InvalidInputError("minBet must be positive")
        if not candidates:
            raise InvalidInputError("A round needs at least one protocol")

        created_at = self.now()
        try:
            ends_at = created_at + timedelta(seconds=duration)
        except OverflowError as exc:
            raise InvalidInputError("duration is out of range") from exc

        with self._registry_lock:
            round_id = self._ids.new_id(self._round_id_bytes)
            while round_id in self._rounds:
                round_id = self._ids.new_id(self._round_id_bytes)
            round_ = Round(
                id=round_id,
                min_bet=minimum,
                created_at=created_at,
                ends_at=ends_at,
                pools={candidate.id: Decimal("0") for candidate in candidates},
                candidate_names={candidate.id: candidate.name for candidate in candidates},
            )
            self._rounds[round_id] = round_
            self._round_locks[round_id] = threading.Lock()

        logger.info(
            "Created round {} with {} protocols (min_bet={}, ends_at={})",
            round_id,
            len(candidates),
            minimum,
            round_.ends_at.isoformat(),
        )
        return copy.deepcopy(round_)

    def new_bet_id(self) -> str:
        with self._registry_lock:
            bet_id = self._ids.new_id(self._bet_id_bytes)
            while bet_id in self._bets:
                bet_id = self._ids.new_id(self._bet_id_bytes)
            return bet_id

    def record_bet(self, bet: Bet) -> None:
        with self._registry_lock:
            self._bets[bet.id] = bet

    def clear(self) -> None:
        """Drop every round and bet; used on application teardown."""

        with self._registry_lock:
            self._rounds.clear()
            self._round_locks.clear()
            self._bets.clear()

    # ------------------------------------------------------------------
    # Access

    @contextmanager
    def lock(self, round_id: str) -> Iterator[Round]:
        """Yield the live round with its lock held."""

        with self._registry_lock:
            round_ = self._rounds.get(round_id)
            round_lock = self._round_locks.get(round_id)
        if round_ is None or round_lock is None:
            raise RoundNotFoundError(round_id)
        with round_lock:
            yield round_

    def get(self, round_id: str) -> Round:
        """Return a consistent deep copy of the round."""

        with self.lock(round_id) as round_:
            return copy.deepcopy(round_)

    def get_bet(self, bet_id: str) -> Bet:
        with self._registry_lock:
            bet = self._bets.get(bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)
        return bet

    def list_open(self, now: datetime | None = None) -> list[RoundSummary]:
        moment = now or self.now()
        with self._registry_lock:
            round_ids = list(self._rounds)
        summaries: list[RoundSummary] = []
        for round_id in round_ids:
            try:
                with self.lock(round_id) as round_:
                    if round_.status is not RoundStatus.OPEN:
                        continue
                    summaries.append(
                        RoundSummary(
                            id=round_.id,
                            total_pool=round_.total_pool,
                            bet_count=len(round_.bets),
                            ends_at=round_.ends_at,
                            time_remaining=round_.time_remaining(moment),
                        )
                    )
            except RoundNotFoundError:
                # Registry was cleared while listing.
                continue
        return summaries

    def stats(self) -> RegistryStats:
        with self._registry_lock:
            rounds = list(self._rounds.values())
            bet_count = len(self._bets)
        open_rounds = sum(1 for round_ in rounds if round_.status is RoundStatus.OPEN)
        return RegistryStats(rounds=len(rounds), open_rounds=open_rounds, bets=bet_count)


__all__ = ["RoundRepository", "utcnow"]
