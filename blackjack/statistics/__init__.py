"""House edge estimates and simulation."""

from blackjack.statistics.house_edge import HouseEdgeCalculator
from blackjack.statistics.simulation import SimulationResult, simulate

__all__ = [
    "HouseEdgeCalculator",
    "SimulationResult",
    "simulate",
]
