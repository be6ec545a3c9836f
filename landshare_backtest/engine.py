"""
Projection engine: one month of the marketplace economics.

Pure step function. The only hidden input is randomness, which is passed in
explicitly as a numpy Generator so runs can be reproduced from a seed.

Per month, in order:
1. Jitter the growth rate by ±market_volatility
2. Grow and churn the user base (on the unrounded previous count)
3. Subscription revenue from premium users
4. Gross booking volume (short-term nights + long-term leases) from MAU
5. Service fees at the blended landowner fee rate
6. Costs: acquisition + fixed + per-user variable
7. Tax on positive pre-tax profit only
"""

from typing import Union

import numpy as np

from .records import ParameterSet, ProjectionPoint


def seed_point(params: ParameterSet) -> ProjectionPoint:
    """Implicit month 0: the starting user base, no money moved yet."""
    return ProjectionPoint(
        month=0,
        users=int(round(params.initial_users)),
        revenue=0.0,
        subscription_revenue=0.0,
        service_fee_revenue=0.0,
        costs=0.0,
        profit=0.0,
        exact_users=float(params.initial_users),
    )


def blended_service_fee_rate(params: ParameterSet) -> float:
    """Linear blend of premium and standard landowner fees, as a fraction."""
    premium_ratio = params.premium_landowner_ratio / 100
    premium_fee = params.premium_landowner_fee / 100
    standard_fee = params.standard_landowner_fee / 100
    return premium_ratio * premium_fee + (1 - premium_ratio) * standard_fee


def growth_factor(params: ParameterSet, draw: float) -> float:
    """Map a uniform [0, 1) draw to a multiplier in [1 - vol, 1 + vol]."""
    return 1 + (params.market_volatility / 100) * (draw * 2 - 1)


def project_month(
    previous: ProjectionPoint,
    params: ParameterSet,
    rng: Union[np.random.Generator, None] = None,
) -> ProjectionPoint:
    if rng is None:
        rng = np.random.default_rng()

    # A draw is consumed every month so the stream lines up across volatility settings
    random_factor = growth_factor(params, float(rng.random()))
    effective_growth_rate = (params.user_growth_rate / 100) * random_factor

    prev_users = previous.exact_users if previous.exact_users is not None else float(previous.users)
    new_users = prev_users * effective_growth_rate
    churned_users = prev_users * (params.churn_rate / 100)
    total_users = prev_users + new_users - churned_users
    active_users = total_users * (params.monthly_active_users / 100)

    premium_users = total_users * (params.premium_conversion_rate / 100)
    subscription_revenue = premium_users * params.premium_subscription_price

    gross_short_term = (
        active_users
        * params.short_term_bookings_per_mau
        * params.avg_nightly_rate
        * params.avg_booking_nights
    )
    gross_long_term = active_users * params.long_term_leases_per_mau * params.avg_monthly_lease_value
    service_fee_revenue = (gross_short_term + gross_long_term) * blended_service_fee_rate(params)

    revenue = subscription_revenue + service_fee_revenue

    acquisition_costs = new_users * params.cac
    variable_costs = total_users * params.variable_cost_per_user
    total_costs = acquisition_costs + params.fixed_costs + variable_costs

    pre_tax_profit = revenue - total_costs
    taxes = pre_tax_profit * (params.tax_rate / 100) if pre_tax_profit > 0 else 0
    profit = pre_tax_profit - taxes

    return ProjectionPoint(
        month=previous.month + 1,
        users=int(round(total_users)),
        revenue=round(revenue, 2),
        subscription_revenue=round(subscription_revenue, 2),
        service_fee_revenue=round(service_fee_revenue, 2),
        costs=round(total_costs, 2),
        profit=round(profit, 2),
        exact_users=total_users,
    )
