"""Statistics API endpoints."""

import logging
from random import Random

from fastapi import APIRouter, HTTPException

from api.schemas import (
    HouseEdgeResponse,
    RulesRequest,
    SimulateRequest,
    SimulationResponse,
)
from blackjack.statistics import HouseEdgeCalculator, simulate
from config import config

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/house-edge")
async def calculate_house_edge(request: RulesRequest | None = None) -> HouseEdgeResponse:
    """Estimate the house edge of a rule set."""
    try:
        rules = request.to_ruleset() if request else config.game.ruleset()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    edge = HouseEdgeCalculator(rules).calculate()
    return HouseEdgeResponse(
        house_edge_percent=float(edge),
        rules=RulesRequest.from_ruleset(rules),
    )


@router.post("/simulate")
def run_simulation(request: SimulateRequest) -> SimulationResponse:
    """Play rounds with basic strategy and report the measured house edge."""
    if request.num_rounds > config.game.max_simulation_rounds:
        raise HTTPException(
            status_code=400,
            detail=f"num_rounds may not exceed {config.game.max_simulation_rounds}",
        )
    try:
        rules = request.rules.to_ruleset() if request.rules else config.game.ruleset()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    result = simulate(
        request.num_rounds,
        rules=rules,
        bet=request.bet,
        rng=Random(request.seed),
    )
    return SimulationResponse(
        rounds=result.rounds,
        hands=result.hands,
        wins=result.wins,
        losses=result.losses,
        pushes=result.pushes,
        blackjacks=result.blackjacks,
        total_wagered=float(result.total_wagered),
        net=float(result.net),
        house_edge_percent=result.house_edge,
        standard_error_percent=result.standard_error,
        expected_house_edge_percent=float(HouseEdgeCalculator(rules).calculate()),
        elapsed_seconds=result.elapsed,
    )
