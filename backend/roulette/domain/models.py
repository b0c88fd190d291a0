"""Typed domain representations shared by the ledger, settlement and API layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping


class RoundStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


@dataclass(frozen=True, slots=True)
class Candidate:
    """Tracked protocol that bettors can stake on."""

    id: str
    name: str
    tvl: float | None = None
    at_risk_positions: int | None = None
    at_risk_value: float | None = None
    avg_health_factor: float | None = None
    liquidations_24h: int | None = None
    liquidation_volume_24h: float | None = None
    risk_level: str | None = None


@dataclass(frozen=True, slots=True)
class Bet:
    id: str
    round_id: str
    agent_id: str
    candidate_id: str
    candidate_name: str
    amount: Decimal
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Payout:
    bet_id: str
    agent_id: str
    bet: Decimal
    payout: Decimal


@dataclass(frozen=True, slots=True)
class RoundResult:
    """Settlement record written once when a round resolves."""

    winner: str | None
    winner_name: str | None
    liquidation_counts: Mapping[str, int]
    resolved_at: datetime
    payouts: tuple[Payout, ...] = ()


@dataclass(slots=True)
class Round:
    """One betting window with its pools, ledger and eventual result.

    ``pools``, ``bets`` and ``total_pool`` only change through bet placement
    while the round is open, always under the round lock held by the
    repository.
    """

    id: str
    min_bet: Decimal
    created_at: datetime
    ends_at: datetime
    pools: dict[str, Decimal] = field(default_factory=dict)
    candidate_names: dict[str, str] = field(default_factory=dict)
    bets: list[Bet] = field(default_factory=list)
    total_pool: Decimal = Decimal("0")
    status: RoundStatus = RoundStatus.OPEN
    result: RoundResult | None = None

    @property
    def is_open(self) -> bool:
        return self.status is RoundStatus.OPEN

    def time_remaining(self, now: datetime) -> float:
        return max(0.0, (self.ends_at - now).total_seconds())


@dataclass(frozen=True, slots=True)
class RoundSummary:
    id: str
    total_pool: Decimal
    bet_count: int
    ends_at: datetime
    time_remaining: float


@dataclass(frozen=True, slots=True)
class OddsQuote:
    """Pari-mutuel quote for one candidate; ``odds`` is None while its pool is empty."""

    pool: Decimal
    odds: Decimal | None
    probability: Decimal


@dataclass(frozen=True, slots=True)
class BetReceipt:
    bet: Bet
    total_pool: Decimal
    odds: dict[str, OddsQuote]


@dataclass(frozen=True, slots=True)
class Resolution:
    round: Round
    winner: str | None
    payouts: tuple[Payout, ...]


@dataclass(frozen=True, slots=True)
class RegistryStats:
    rounds: int
    open_rounds: int
    bets: int
