from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from roulette.catalogue import CandidateCatalogue
from roulette.domain import Candidate
from roulette.repositories import RoundRepository
from roulette.services.ids import SequentialIdGenerator
from roulette.services.round_service import RoundService


class FakeClock:
    """Manually advanced clock so time-dependent fields are predictable."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalogue() -> CandidateCatalogue:
    return CandidateCatalogue(
        [
            Candidate(id="X", name="Protocol X", tvl=100.0, avg_health_factor=1.2, risk_level="high"),
            Candidate(id="Y", name="Protocol Y", tvl=200.0, avg_health_factor=1.5, risk_level="low"),
        ]
    )


@pytest.fixture
def repository(clock) -> RoundRepository:
    return RoundRepository(id_generator=SequentialIdGenerator("id"), clock=clock)


@pytest.fixture
def service(repository, catalogue) -> RoundService:
    return RoundService(repository, catalogue, house_cut=Decimal("0.05"))

