from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from roulette.schemas import (
    CreateRoundRequest,
    OddsEntry,
    PlaceBetRequest,
    ResolveRoundRequest,
    RoundOut,
)


def test_place_bet_request_accepts_camel_case_fields():
    request = PlaceBetRequest.model_validate({"agentId": "A", "protocolId": "X", "amount": 12.5})

    assert request.agent_id == "A"
    assert request.protocol_id == "X"
    assert request.amount == Decimal("12.5")


@pytest.mark.parametrize(
    "payload",
    [
        {"agentId": "A", "protocolId": "X"},
        {"agentId": "", "protocolId": "X", "amount": 10},
        {"agentId": "A", "protocolId": "X", "amount": 0},
        {"agentId": "A", "protocolId": "X", "amount": 10, "tip": 1},
    ],
)
def test_place_bet_request_rejects_missing_or_unknown_fields(payload):
    with pytest.raises(ValidationError):
        PlaceBetRequest.model_validate(payload)


def test_create_round_request_is_fully_optional():
    request = CreateRoundRequest.model_validate({})

    assert request.duration is None
    assert request.min_bet is None
    assert request.protocol_ids is None


def test_resolve_request_rejects_negative_counts():
    with pytest.raises(ValidationError):
        ResolveRoundRequest.model_validate({"liquidationData": {"X": -1}})
    with pytest.raises(ValidationError):
        ResolveRoundRequest.model_validate({"liquidationData": {}})


def test_odds_entry_coerces_decimal_fields():
    entry = OddsEntry(name="X", pool=Decimal("100"), odds=Decimal("4.00"), probability=Decimal("25.0"))

    assert isinstance(entry.pool, float)
    assert entry.odds == 4.0
    assert entry.probability == 25.0
    assert OddsEntry(name="Y", pool=Decimal("0"), odds=None, probability=Decimal("0")).odds is None


def test_round_out_serializes_with_camel_case_keys(service):
    round_ = service.create_round(duration_seconds=3600, min_bet=5)
    service.place_bet(round_.id, "A", "X", 100)

    payload = RoundOut.from_domain(service.get_round(round_.id)).model_dump(mode="json", by_alias=True)

    assert payload["totalPool"] == 100.0
    assert payload["minBet"] == 5.0
    assert payload["pools"] == {"X": 100.0, "Y": 0.0}
    assert payload["bets"][0]["protocolId"] == "X"
    assert payload["bets"][0]["protocolName"] == "Protocol X"
    assert payload["status"] == "open"
    assert payload["result"] is None
    assert payload["createdAt"].startswith("2026-01-01T12:00:00")
