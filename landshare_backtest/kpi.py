"""
KPI analyzer: unit economics for a parameter set and its history.

LTV is a steady-state approximation computed from the parameters alone, so it
does not wobble with the volatility draws. Break-even is read off the history.
"""

import math
from typing import Iterable

from .constants import BREAK_EVEN_NEVER
from .engine import blended_service_fee_rate
from .records import ParameterSet, ProjectionPoint, KPISummary


def average_revenue_per_user(params: ParameterSet) -> float:
    mau_ratio = params.monthly_active_users / 100
    sub_revenue_per_user = params.premium_subscription_price * (params.premium_conversion_rate / 100)

    gross_short_term_per_mau = (
        params.short_term_bookings_per_mau * params.avg_nightly_rate * params.avg_booking_nights
    )
    gross_long_term_per_mau = params.long_term_leases_per_mau * params.avg_monthly_lease_value
    fee_per_mau = (gross_short_term_per_mau + gross_long_term_per_mau) * blended_service_fee_rate(params)

    return sub_revenue_per_user + fee_per_mau * mau_ratio


def gross_margin(params: ParameterSet, arpu: float) -> float:
    # Only the denominator is guarded
    return 1 - (params.variable_cost_per_user / (arpu if arpu > 0 else 1))


def lifetime_value(params: ParameterSet) -> float:
    churn = params.churn_rate / 100
    if churn <= 0:
        return math.inf
    arpu = average_revenue_per_user(params)
    return (arpu * gross_margin(params, arpu)) / churn


def break_even_month(history: Iterable[ProjectionPoint]) -> int:
    """First month whose cumulative profit is strictly positive, else -1."""
    cumulative = 0.0
    for point in history:
        cumulative += point.profit
        if cumulative > 0:
            return point.month
    return BREAK_EVEN_NEVER


def compute_kpis(params: ParameterSet, history: Iterable[ProjectionPoint]) -> KPISummary:
    ltv = lifetime_value(params)
    ratio = ltv / params.cac if params.cac > 0 else math.inf
    return KPISummary(
        cac=params.cac,
        ltv=ltv,
        ratio=ratio,
        break_even_month=break_even_month(history),
    )
