from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Mapping

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel

from .domain import Bet, Candidate, OddsQuote, Payout, RegistryStats, Round, RoundResult, RoundSummary
from .repositories import MAX_ROUND_DURATION_SECONDS


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def _coerce_money(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


Money = Annotated[float, BeforeValidator(_coerce_money)]


# ----------------------------------------------------------------------
# Requests


class CreateRoundRequest(RequestModel):
    duration: int | None = Field(
        default=None, gt=0, le=MAX_ROUND_DURATION_SECONDS, description="Round length in seconds"
    )
    min_bet: Decimal | None = Field(default=None, gt=0, description="Minimum stake in USDC")
    protocol_ids: list[str] | None = Field(
        default=None,
        min_length=1,
        description="Restrict the round to these protocols (defaults to the full catalogue)",
    )


class PlaceBetRequest(RequestModel):
    agent_id: str = Field(min_length=1)
    protocol_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0, description="Stake in USDC")


class ResolveRoundRequest(RequestModel):
    liquidation_data: dict[str, NonNegativeInt] = Field(
        min_length=1,
        description="Liquidation events observed per protocol during the round",
    )


# ----------------------------------------------------------------------
# Responses


class Protocol(CamelModel):
    id: str
    name: str
    tvl: float | None = None
    at_risk_positions: int | None = None
    at_risk_value: float | None = None
    avg_health_factor: float | None = None
    liquidations_24h: int | None = None
    liquidation_volume_24h: float | None = None
    risk_level: str | None = None

    @classmethod
    def from_domain(cls, candidate: Candidate) -> "Protocol":
        return cls(
            id=candidate.id,
            name=candidate.name,
            tvl=candidate.tvl,
            at_risk_positions=candidate.at_risk_positions,
            at_risk_value=candidate.at_risk_value,
            avg_health_factor=candidate.avg_health_factor,
            liquidations_24h=candidate.liquidations_24h,
            liquidation_volume_24h=candidate.liquidation_volume_24h,
            risk_level=candidate.risk_level,
        )


class ProtocolList(CamelModel):
    protocols: list[Protocol]
    count: int


class BetOut(CamelModel):
    id: str
    round_id: str
    agent_id: str
    protocol_id: str
    protocol_name: str
    amount: Money
    timestamp: datetime

    @classmethod
    def from_domain(cls, bet: Bet) -> "BetOut":
        return cls(
            id=bet.id,
            round_id=bet.round_id,
            agent_id=bet.agent_id,
            protocol_id=bet.candidate_id,
            protocol_name=bet.candidate_name,
            amount=bet.amount,
            timestamp=bet.timestamp,
        )


class Winner(CamelModel):
    bet_id: str
    agent_id: str
    bet: Money
    payout: Money

    @classmethod
    def from_domain(cls, payout: Payout) -> "Winner":
        return cls(bet_id=payout.bet_id, agent_id=payout.agent_id, bet=payout.bet, payout=payout.payout)


class RoundResultOut(CamelModel):
    winner: str | None
    winner_name: str | None
    liquidation_counts: dict[str, int]
    resolved_at: datetime
    payouts: list[Winner] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: RoundResult) -> "RoundResultOut":
        return cls(
            winner=result.winner,
            winner_name=result.winner_name,
            liquidation_counts=dict(result.liquidation_counts),
            resolved_at=result.resolved_at,
            payouts=[Winner.from_domain(payout) for payout in result.payouts],
        )


class OddsEntry(CamelModel):
    name: str
    pool: Money
    odds: Money | None = Field(description="Decimal payout multiplier before the house cut; null until backed")
    probability: Money = Field(description="Implied probability in percent")


def odds_breakdown(
    quotes: Mapping[str, OddsQuote], names: Mapping[str, str]
) -> dict[str, OddsEntry]:
    return {
        candidate_id: OddsEntry(
            name=names.get(candidate_id, candidate_id),
            pool=quote.pool,
            odds=quote.odds,
            probability=quote.probability,
        )
        for candidate_id, quote in quotes.items()
    }


class RoundOut(CamelModel):
    id: str
    status: str
    pools: dict[str, Money]
    bets: list[BetOut]
    min_bet: Money
    total_pool: Money
    created_at: datetime
    ends_at: datetime
    result: RoundResultOut | None = None

    @classmethod
    def from_domain(cls, round_: Round) -> "RoundOut":
        return cls(
            id=round_.id,
            status=round_.status.value,
            pools={candidate_id: float(pool) for candidate_id, pool in round_.pools.items()},
            bets=[BetOut.from_domain(bet) for bet in round_.bets],
            min_bet=round_.min_bet,
            total_pool=round_.total_pool,
            created_at=round_.created_at,
            ends_at=round_.ends_at,
            result=RoundResultOut.from_domain(round_.result) if round_.result else None,
        )


class RoundDetail(RoundOut):
    odds_breakdown: dict[str, OddsEntry]
    time_remaining: float = Field(description="Seconds until the advisory end time, clamped at zero")


class RoundEnvelope(CamelModel):
    round: RoundOut


class RoundSummaryOut(CamelModel):
    id: str
    total_pool: Money
    bet_count: int
    ends_at: datetime
    time_remaining: float

    @classmethod
    def from_domain(cls, summary: RoundSummary) -> "RoundSummaryOut":
        return cls(
            id=summary.id,
            total_pool=summary.total_pool,
            bet_count=summary.bet_count,
            ends_at=summary.ends_at,
            time_remaining=summary.time_remaining,
        )


class RoundList(CamelModel):
    rounds: list[RoundSummaryOut]
    count: int


class BetPlaced(CamelModel):
    bet: BetOut
    total_pool: Money
    current_odds: dict[str, OddsEntry]


class RoundResolved(CamelModel):
    round: RoundOut
    winners: list[Winner]


class RegistryStatsOut(CamelModel):
    tracked_protocols: int
    active_rounds: int
    total_rounds: int
    total_bets: int

    @classmethod
    def from_domain(cls, stats: RegistryStats, *, tracked_protocols: int) -> "RegistryStatsOut":
        return cls(
            tracked_protocols=tracked_protocols,
            active_rounds=stats.open_rounds,
            total_rounds=stats.rounds,
            total_bets=stats.bets,
        )


class Health(CamelModel):
    status: str
    stats: RegistryStatsOut


class RiskAnalysis(CamelModel):
    analysis: str


class RoundPrediction(CamelModel):
    round_id: str
    prediction: str


class PostMortem(CamelModel):
    round_id: str
    analysis: str
