from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from fastapi.concurrency import run_in_threadpool

from . import schemas
from .core.config import get_settings, settings
from .core.errors import LedgerError
from .services.narrative_service import NarrativeService
from .services.round_service import RoundService

app = FastAPI(title="Liquidation Roulette API", version="0.1.0", debug=settings.debug)


@lru_cache
def get_round_service() -> RoundService:
    """Return the process-wide round service, building it on first use."""

    return RoundService.from_settings(get_settings())


@lru_cache
def get_narrative_service() -> NarrativeService:
    return NarrativeService(get_settings())


def _round_service() -> RoundService:
    return get_round_service()


def _narrative_service() -> NarrativeService:
    return get_narrative_service()


@app.on_event("shutdown")
def on_shutdown() -> None:
    """Release every round held in memory."""

    if get_round_service.cache_info().currsize:
        get_round_service().close()
    get_round_service.cache_clear()
    get_narrative_service.cache_clear()


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _error_summaries(exc: RequestValidationError) -> list[dict]:
    # Offending inputs are not echoed back; they may not be JSON serialisable.
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(_error_summaries(exc))},
    )


@app.get("/healthz", response_model=schemas.Health, tags=["system"])
def healthcheck(service: RoundService = Depends(_round_service)):
    """Readiness probe with registry counters."""

    stats = schemas.RegistryStatsOut.from_domain(
        service.stats(), tracked_protocols=len(service.catalogue)
    )
    return schemas.Health(status="ok", stats=stats)


@app.get("/protocols", response_model=schemas.ProtocolList, tags=["protocols"])
def list_protocols(service: RoundService = Depends(_round_service)):
    """List the protocols rounds can be created with."""

    protocols = [schemas.Protocol.from_domain(candidate) for candidate in service.catalogue]
    return schemas.ProtocolList(protocols=protocols, count=len(protocols))


@app.post("/rounds/create", response_model=schemas.RoundEnvelope, tags=["rounds"])
def create_round(
    body: schemas.CreateRoundRequest | None = None,
    service: RoundService = Depends(_round_service),
):
    """Open a new round with empty pools for every requested protocol."""

    request = body or schemas.CreateRoundRequest()
    round_ = service.create_round(
        duration_seconds=request.duration,
        min_bet=request.min_bet,
        candidate_ids=request.protocol_ids,
    )
    return schemas.RoundEnvelope(round=schemas.RoundOut.from_domain(round_))


@app.get("/rounds", response_model=schemas.RoundList, tags=["rounds"])
def list_rounds(service: RoundService = Depends(_round_service)):
    """Return summaries of every round still open for betting."""

    summaries = [schemas.RoundSummaryOut.from_domain(item) for item in service.list_open_rounds()]
    return schemas.RoundList(rounds=summaries, count=len(summaries))


@app.get("/rounds/{round_id}", response_model=schemas.RoundDetail, tags=["rounds"])
def get_round(round_id: str, service: RoundService = Depends(_round_service)):
    view = service.round_view(round_id)
    base = schemas.RoundOut.from_domain(view.round)
    return schemas.RoundDetail(
        **base.model_dump(),
        odds_breakdown=schemas.odds_breakdown(view.odds, view.round.candidate_names),
        time_remaining=view.time_remaining,
    )


@app.post("/rounds/{round_id}/bet", response_model=schemas.BetPlaced, tags=["rounds"])
def place_bet(
    round_id: str,
    body: schemas.PlaceBetRequest,
    service: RoundService = Depends(_round_service),
):
    receipt = service.place_bet(round_id, body.agent_id, body.protocol_id, body.amount)
    return schemas.BetPlaced(
        bet=schemas.BetOut.from_domain(receipt.bet),
        total_pool=receipt.total_pool,
        current_odds=schemas.odds_breakdown(receipt.odds, service.candidate_names()),
    )


@app.post("/rounds/{round_id}/resolve", response_model=schemas.RoundResolved, tags=["rounds"])
def resolve_round(
    round_id: str,
    body: schemas.ResolveRoundRequest,
    service: RoundService = Depends(_round_service),
):
    """Settle the round against the reported liquidation counts."""

    resolution = service.resolve_round(round_id, body.liquidation_data)
    return schemas.RoundResolved(
        round=schemas.RoundOut.from_domain(resolution.round),
        winners=[schemas.Winner.from_domain(payout) for payout in resolution.payouts],
    )


@app.get("/bets/{bet_id}", response_model=schemas.BetOut, tags=["bets"])
def get_bet(bet_id: str, service: RoundService = Depends(_round_service)):
    return schemas.BetOut.from_domain(service.get_bet(bet_id))


@app.get("/ai/risk-analysis", response_model=schemas.RiskAnalysis, tags=["ai"])
async def risk_analysis(
    service: RoundService = Depends(_round_service),
    narratives: NarrativeService = Depends(_narrative_service),
):
    analysis = await narratives.risk_analysis(list(service.catalogue))
    return schemas.RiskAnalysis(analysis=analysis)


@app.get("/ai/predict-round/{round_id}", response_model=schemas.RoundPrediction, tags=["ai"])
async def predict_round(
    round_id: str,
    service: RoundService = Depends(_round_service),
    narratives: NarrativeService = Depends(_narrative_service),
):
    snapshot = await run_in_threadpool(service.get_round, round_id)
    prediction = await narratives.predict_round(snapshot)
    return schemas.RoundPrediction(round_id=round_id, prediction=prediction)


@app.get("/ai/post-mortem/{round_id}", response_model=schemas.PostMortem, tags=["ai"])
async def post_mortem(
    round_id: str,
    service: RoundService = Depends(_round_service),
    narratives: NarrativeService = Depends(_narrative_service),
):
    snapshot = await run_in_threadpool(service.get_round, round_id)
    analysis = await narratives.post_mortem(snapshot)
    return schemas.PostMortem(round_id=round_id, analysis=analysis)
