"""FastAPI server exposing the game to the dashboard."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from apscheduler.schedulers.base import BaseScheduler

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt

from mytherra import __version__
from mytherra.betting.models import BetFilters, BetStatus
from mytherra.exceptions import MytherraError, ValidationError
from mytherra.game import Game

logger = logging.getLogger(__name__)


class PlaceBetRequest(BaseModel):
    bet_type: str
    target_id: str
    target_type: str | None = None
    description: str
    timeframe: StrictInt
    confidence: str
    divine_favor_stake: StrictInt


class InfluenceRequest(BaseModel):
    target_id: str
    action: str
    strength: str = "moderate"
    target_type: str | None = None


class ErrorBody(BaseModel):
    error: str
    detail: str
    field: str | None = None


def _error_response(exc: MytherraError) -> JSONResponse:
    body = ErrorBody(
        error=type(exc).__name__,
        detail=exc.message,
        field=exc.field if isinstance(exc, ValidationError) else None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app(game: Game, scheduler: BaseScheduler | None = None) -> FastAPI:
    """Build the API around an existing game.

    When a scheduler is given it is started with the app and shut down on
    exit, so ticks and requests share one Game and one state file.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
            logger.info(f"✓ Tick scheduler started with {len(scheduler.get_jobs())} jobs")
        try:
            yield
        finally:
            if scheduler is not None and scheduler.running:
                scheduler.shutdown(wait=True)
                logger.info("✓ Tick scheduler stopped")

    app = FastAPI(title="Mytherra API", version=__version__, lifespan=lifespan)
    app.state.game = game

    app.add_middleware(
        CORSMiddleware,
        allow_origins=game.settings.api.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MytherraError)
    async def handle_mytherra_error(request: Request, exc: MytherraError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return _error_response(exc)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "current_year": game.clock.current_year,
            "tick_in_progress": game.scheduler.in_progress,
        }

    @app.get("/api/world")
    def get_world():
        """Current year, entity counts and every entity."""
        return game.world_summary()

    @app.get("/api/events")
    def get_events(limit: int = Query(default=20, ge=1, le=200)):
        """Most recent world events, newest first."""
        return [event.model_dump() for event in game.recent_events(limit)]

    @app.get("/api/favor")
    def get_favor():
        return game.get_account().model_dump()

    @app.get("/api/odds")
    def get_odds(
        bet_type: str,
        target_id: str,
        target_type: str | None = None,
        confidence: str = "possible",
        timeframe: int = 5,
        stake: int | None = None,
    ):
        quote = game.get_odds(
            bet_type,
            target_id,
            target_type=target_type,
            confidence=confidence,
            timeframe=timeframe,
            stake=stake,
        )
        return quote.model_dump()

    @app.get("/api/bets")
    def list_bets(
        status: BetStatus | None = None,
        bet_type: str | None = None,
        target_id: str | None = None,
        confidence: str | None = None,
        limit: int = Query(default=20, ge=1),
        offset: int = Query(default=0, ge=0),
    ):
        filters = BetFilters(
            status=status,
            bet_type=bet_type,
            target_id=target_id,
            confidence=confidence,
            limit=limit,
            offset=offset,
        )
        return [bet.model_dump(mode="json") for bet in game.list_bets(filters)]

    @app.get("/api/bets/{bet_id}")
    def get_bet(bet_id: str):
        return game.get_bet(bet_id).model_dump(mode="json")

    @app.post("/api/bets", status_code=201)
    def place_bet(request: PlaceBetRequest):
        bet = game.place_bet(
            bet_type=request.bet_type,
            target_id=request.target_id,
            description=request.description,
            timeframe=request.timeframe,
            confidence=request.confidence,
            divine_favor_stake=request.divine_favor_stake,
            target_type=request.target_type,
        )
        return bet.model_dump(mode="json")

    @app.post("/api/bets/process-expired")
    def process_expired_bets():
        return game.process_expired_bets().model_dump()

    @app.post("/api/tick")
    def run_tick():
        return game.run_tick().model_dump(mode="json")

    @app.post("/api/influence")
    def apply_influence(request: InfluenceRequest):
        result = game.apply_influence(
            target_id=request.target_id,
            action=request.action,
            strength=request.strength,
            target_type=request.target_type,
        )
        return result.model_dump(mode="json")

    return app
