"""Static catalogue of tracked Solana lending and perps protocols."""

from __future__ import annotations

from typing import Iterable, Iterator

from .core.errors import CandidateNotFoundError
from .domain import Candidate

DEFAULT_PROTOCOLS: tuple[Candidate, ...] = (
    Candidate(
        id="marinade",
        name="Marinade Finance",
        tvl=850_000_000,
        at_risk_positions=234,
        at_risk_value=12_500_000,
        avg_health_factor=1.45,
        liquidations_24h=12,
        liquidation_volume_24h=450_000,
        risk_level="medium",
    ),
    Candidate(
        id="solend",
        name="Solend",
        tvl=420_000_000,
        at_risk_positions=567,
        at_risk_value=28_000_000,
        avg_health_factor=1.25,
        liquidations_24h=34,
        liquidation_volume_24h=1_200_000,
        risk_level="high",
    ),
    Candidate(
        id="mango",
        name="Mango Markets",
        tvl=180_000_000,
        at_risk_positions=123,
        at_risk_value=8_500_000,
        avg_health_factor=1.55,
        liquidations_24h=8,
        liquidation_volume_24h=280_000,
        risk_level="low",
    ),
    Candidate(
        id="drift",
        name="Drift Protocol",
        tvl=320_000_000,
        at_risk_positions=345,
        at_risk_value=18_000_000,
        avg_health_factor=1.32,
        liquidations_24h=23,
        liquidation_volume_24h=890_000,
        risk_level="medium-high",
    ),
    Candidate(
        id="kamino",
        name="Kamino Finance",
        tvl=560_000_000,
        at_risk_positions=189,
        at_risk_value=9_200_000,
        avg_health_factor=1.48,
        liquidations_24h=15,
        liquidation_volume_24h=520_000,
        risk_level="medium",
    ),
)


class CandidateCatalogue:
    """Read-only lookup over the candidates a round can be created with."""

    def __init__(self, candidates: Iterable[Candidate] = DEFAULT_PROTOCOLS) -> None:
        self._candidates: dict[str, Candidate] = {}
        for candidate in candidates:
            if candidate.id in self._candidates:
                raise ValueError(f"Duplicate candidate id '{candidate.id}'")
            self._candidates[candidate.id] = candidate

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._candidates

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates.values())

    def __len__(self) -> int:
        return len(self._candidates)

    def get(self, candidate_id: str) -> Candidate:
        try:
            return self._candidates[candidate_id]
        except KeyError as exc:
            raise CandidateNotFoundError(candidate_id) from exc

    def select(self, candidate_ids: Iterable[str] | None = None) -> list[Candidate]:
        """Return the requested candidates in request order, or all of them."""

        if candidate_ids is None:
            return list(self._candidates.values())
        selected: list[Candidate] = []
        seen: set[str] = set()
        for candidate_id in candidate_ids:
            if candidate_id in seen:
                continue
            seen.add(candidate_id)
            selected.append(self.get(candidate_id))
        return selected


__all__ = ["CandidateCatalogue", "DEFAULT_PROTOCOLS"]
