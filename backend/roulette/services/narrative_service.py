"""Risk, prediction and post-mortem narratives generated by an LLM provider.

Calls run in a worker thread under a timeout. Callers pass snapshots, never
live rounds, so no ledger lock is held while a provider is slow or failing.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Sequence

from loguru import logger

from roulette.core.config import Settings
from roulette.core.errors import InvalidStateError, NarrativeUnavailableError
from roulette.domain import Candidate, Round, RoundResult, RoundStatus

from .llm import LLMProvider, get_provider
from .odds import compute_odds


def _risk_prompt(candidates: Sequence[Candidate]) -> str:
    metrics = [
        {
            "name": candidate.name,
            "tvl": candidate.tvl,
            "avgHealthFactor": candidate.avg_health_factor,
            "atRiskValue": candidate.at_risk_value,
            "liquidations24h": candidate.liquidations_24h,
        }
        for candidate in candidates
    ]
    return (
        "You are a DeFi liquidation analyst covering Solana lending and perps protocols.\n"
        f"Protocols: {json.dumps(metrics)}\n\n"
        "Rank the protocols by how likely they are to see mass liquidations next. "
        "Weigh collateral mix, health factor distribution, oracle dependencies and "
        "market volatility. Answer in the style of a risk report, 3-4 sentences."
    )


def _prediction_prompt(round_: Round) -> str:
    odds = compute_odds(round_)
    book = {
        candidate_id: {
            "name": round_.candidate_names.get(candidate_id, candidate_id),
            "pool": float(quote.pool),
            "odds": float(quote.odds) if quote.odds is not None else None,
        }
        for candidate_id, quote in odds.items()
    }
    duration = int((round_.ends_at - round_.created_at).total_seconds())
    return (
        "Predict the outcome of this Liquidation Roulette round.\n"
        f"Round: {round_.id}, duration: {duration}s, total pool: {float(round_.total_pool)} USDC, "
        f"bets placed: {len(round_.bets)}\n"
        f"Book: {json.dumps(book)}\n\n"
        "Which protocol will record the most liquidations before the round ends? "
        "Consider current market conditions and Solana-specific DeFi risk. "
        "Give one pick with a confidence percentage."
    )


def _post_mortem_prompt(round_: Round, result: RoundResult) -> str:
    return (
        "Write a post-mortem for a completed Liquidation Roulette round.\n"
        f"Winner: {result.winner_name or 'none (no liquidations reported)'}\n"
        f"Liquidations: {json.dumps(dict(result.liquidation_counts))}\n"
        f"Total pot: ${float(round_.total_pool)}\n\n"
        "What drove the liquidation cascade, were there warning signs, and what "
        "should traders take away? Keep it to 3-4 sentences."
    )


class NarrativeService:
    """Async facade over the configured LLM provider."""

    def __init__(self, settings: Settings, *, provider: LLMProvider | None = None) -> None:
        self._settings = settings
        self._provider = provider

    def _resolve_provider(self) -> LLMProvider:
        if self._provider is not None:
            return self._provider
        return get_provider(self._settings.llm_default_provider)

    async def risk_analysis(self, candidates: Sequence[Candidate]) -> str:
        return await self._generate(_risk_prompt(candidates), purpose="risk-analysis")

    async def predict_round(self, round_: Round) -> str:
        return await self._generate(_prediction_prompt(round_), purpose=f"predict:{round_.id}")

    async def post_mortem(self, round_: Round) -> str:
        if round_.status is not RoundStatus.RESOLVED or round_.result is None:
            raise InvalidStateError("Round has not been resolved yet")
        prompt = _post_mortem_prompt(round_, round_.result)
        return await self._generate(prompt, purpose=f"post-mortem:{round_.id}")

    async def _generate(self, prompt: str, *, purpose: str) -> str:
        timeout = self._settings.narrative_timeout_seconds
        try:
            provider = self._resolve_provider()
            client: Any = provider.build_client(self._settings)
            model = self._settings.narrative_model or provider.default_model()
            return await asyncio.wait_for(
                asyncio.to_thread(
                    provider.generate,
                    client,
                    model=model,
                    prompt=prompt,
                    max_output_tokens=self._settings.narrative_max_output_tokens,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Narrative generation timed out after {}s purpose={}", timeout, purpose)
            raise NarrativeUnavailableError("Narrative generation timed out") from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Narrative generation failed purpose={}", purpose)
            raise NarrativeUnavailableError(f"Narrative generation failed: {exc}") from exc


__all__ = ["NarrativeService"]
