"""FastAPI application: read-only queries over match states."""

import logging
import os
from typing import Any, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from match_slice import actions, wagers
from match_slice.engine import replay
from match_slice.errors import MatchSliceError
from match_slice.game_definitions import STATIC_GAME_DEFINITIONS, get_game_definition
from match_slice.models import (
    ErrorResponse,
    GameDefinition,
    GameDefinitionSummary,
    MatchState,
    SliceRequest,
    SliceResponse,
)
from match_slice.players import players

logger = logging.getLogger(__name__)

logging.getLogger("match_slice").setLevel(
    os.getenv("MATCH_SLICE_LOG_LEVEL", "INFO").upper()
)

app = FastAPI(title="Match Slice API")

# ---------- Rate Limiting ----------

_rate_limit_enabled = os.getenv("RATE_LIMIT_ENABLED", "1") != "0"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=_rate_limit_enabled,
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please slow down."},
    )


@app.exception_handler(MatchSliceError)
async def _match_slice_error_handler(request: Request, exc: MatchSliceError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


_allow_origins = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- REST endpoints ----------


@app.get("/api/game-definitions", response_model=list[GameDefinitionSummary])
@limiter.limit("30/minute")
async def list_game_definitions(request: Request):
    return [
        GameDefinitionSummary(
            name=name,
            betting_type=game_def.betting_type,
            number_of_players=game_def.number_of_players,
        )
        for name, game_def in STATIC_GAME_DEFINITIONS.items()
    ]


@app.get(
    "/api/game-definitions/{name}",
    response_model=GameDefinition,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit("30/minute")
async def get_game_definition_by_name(request: Request, name: str):
    game_def = get_game_definition(name)
    if game_def is None:
        raise HTTPException(status_code=404, detail="Game definition not found")
    return game_def


@app.post(
    "/api/slice",
    response_model=SliceResponse,
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit("60/minute")
async def slice_match_state(request: Request, req: SliceRequest):
    """Derive pot and wager sizes (and optionally player views) for a match state."""
    game_def = _resolve_game_definition(req.game_definition)
    state = MatchState.parse(req.match_state)

    snapshot = replay(state, game_def)
    seat_views = []
    if req.seat is not None:
        names = req.player_names or [
            f"Player{i}" for i in range(game_def.number_of_players)
        ]
        try:
            seat_views = players(
                state, game_def, req.seat, names, req.settled_balances
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    return SliceResponse(
        hand_number=state.hand_number,
        round=snapshot.round,
        betting_sequence=actions.betting_sequence(state, game_def),
        no_limit=wagers.no_limit(game_def),
        pot_at_start_of_round=wagers.pot_at_start_of_round(state, game_def),
        pot_after_call=wagers.pot_after_call(state, game_def),
        minimum_wager_to=wagers.minimum_wager_to(state, game_def),
        pot_fraction_wager_to=wagers.pot_fraction_wager_to(
            state, game_def, req.pot_fraction
        ),
        all_in=wagers.all_in(state, game_def),
        players=seat_views,
    )


# ---------- Helpers ----------


def _resolve_game_definition(value: Union[str, dict[str, Any]]) -> GameDefinition:
    """Look up a standard game by name, or build one from its fields."""
    if isinstance(value, str):
        game_def = get_game_definition(value)
        if game_def is None:
            raise HTTPException(
                status_code=400, detail=f"Unknown game definition: {value}"
            )
        return game_def
    try:
        return GameDefinition.model_validate(value)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise HTTPException(status_code=400, detail=str(e))
