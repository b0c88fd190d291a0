from __future__ import annotations

import pytest

from roulette.catalogue import DEFAULT_PROTOCOLS, CandidateCatalogue
from roulette.core.errors import CandidateNotFoundError
from roulette.domain import Candidate


def test_default_catalogue_tracks_five_protocols():
    catalogue = CandidateCatalogue()

    assert len(catalogue) == 5
    assert [candidate.id for candidate in catalogue] == [p.id for p in DEFAULT_PROTOCOLS]
    assert catalogue.get("solend").risk_level == "high"
    assert "kamino" in catalogue


def test_select_preserves_request_order_and_drops_duplicates():
    catalogue = CandidateCatalogue()

    selected = catalogue.select(["drift", "mango", "drift"])

    assert [candidate.id for candidate in selected] == ["drift", "mango"]


def test_unknown_candidate_raises():
    with pytest.raises(CandidateNotFoundError):
        CandidateCatalogue().get("aave")


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError):
        CandidateCatalogue([Candidate(id="a", name="A"), Candidate(id="a", name="A2")])
