"""
Landshare Backtest — Mesa Model

Horizon builder for the projection engine. Each Mesa step is one simulated
month; the DataCollector records every ProjectionPoint so the full
time-series can be exported as columns.

Mesa gives us:
- Seeded numpy Generator (model.rng) for reproducible volatility draws
- DataCollector time-series → pandas / JSON / CSV
"""

import logging
from typing import Optional, List, Dict, Any

import mesa
import numpy as np

from .constants import MAX_MONTHS, MONTHS_PER_YEAR
from .engine import seed_point, project_month
from .records import ParameterSet, ProjectionPoint, AnnualPoint

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "month", "users", "revenue", "subscription_revenue",
    "service_fee_revenue", "costs", "profit",
]


class BacktestModel(mesa.Model):
    """
    Month-by-month financial projection.

    The model never patches history: a new ParameterSet means a new model,
    stepped from the month-0 seed.
    """

    def __init__(self, params: Optional[ParameterSet] = None, seed: Optional[int] = None):
        rng = np.random.default_rng(seed) if seed is not None else np.random.default_rng()
        super().__init__(rng=rng)

        self.params = params or ParameterSet()
        self.seed_value = seed
        self.latest: ProjectionPoint = seed_point(self.params)
        self.points: List[ProjectionPoint] = []

        self.datacollector = mesa.DataCollector(
            model_reporters={
                "month": lambda m: m.latest.month,
                "users": lambda m: m.latest.users,
                "revenue": lambda m: m.latest.revenue,
                "subscription_revenue": lambda m: m.latest.subscription_revenue,
                "service_fee_revenue": lambda m: m.latest.service_fee_revenue,
                "costs": lambda m: m.latest.costs,
                "profit": lambda m: m.latest.profit,
            }
        )

    @property
    def current_month(self) -> int:
        return self.latest.month

    def step(self) -> None:
        self.latest = project_month(self.latest, self.params, self.rng)
        self.points.append(self.latest)
        self.datacollector.collect(self)

    def run(self, months: int = MAX_MONTHS) -> List[ProjectionPoint]:
        for _ in range(months):
            self.step()
        return list(self.points)

    def get_history(self) -> Dict[str, Any]:
        """Export DataCollector time-series as JSON-ready columns."""
        df = self.datacollector.get_model_vars_dataframe()
        if df.empty:
            return {col: [] for col in HISTORY_COLUMNS}
        return {col: df[col].tolist() for col in HISTORY_COLUMNS}


def build_history(
    params: ParameterSet,
    seed: Optional[int] = None,
    months: int = MAX_MONTHS,
) -> List[ProjectionPoint]:
    """Regenerate the full horizon from month 1."""
    model = BacktestModel(params, seed=seed)
    history = model.run(months)
    logger.debug("Built %d-month history for %r (seed=%s)", len(history), params.name, seed)
    return history


def build_annual(history: List[ProjectionPoint]) -> List[AnnualPoint]:
    """
    Roll monthly points up into years.

    Stocks (users) are taken at year end; flows (money) are summed.
    A trailing partial year is still emitted.
    """
    annual = []
    for year, start in enumerate(range(0, len(history), MONTHS_PER_YEAR), start=1):
        chunk = history[start:start + MONTHS_PER_YEAR]
        last = chunk[-1]
        annual.append(AnnualPoint(
            year=year,
            month=last.month,
            users=last.users,
            revenue=round(sum(p.revenue for p in chunk), 2),
            subscription_revenue=round(sum(p.subscription_revenue for p in chunk), 2),
            service_fee_revenue=round(sum(p.service_fee_revenue for p in chunk), 2),
            costs=round(sum(p.costs for p in chunk), 2),
            profit=round(sum(p.profit for p in chunk), 2),
        ))
    return annual
