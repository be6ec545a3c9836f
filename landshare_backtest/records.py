"""
Data records for the Landshare backtest simulator.

- ParameterSet: complete input to a run (percent fields as entered)
- ProjectionPoint: one simulated month, immutable once produced
- AnnualPoint: 12-month roll-up of projection points
- KPISummary: derived unit economics
- Preset: a named, stored ParameterSet
"""

import math
from dataclasses import dataclass, field, fields, asdict, replace
from typing import Any, Dict, Optional

from .constants import DEFAULT_PARAMS, BREAK_EVEN_NEVER


class ParameterError(ValueError):
    """A parameter value could not be interpreted as a number."""


@dataclass(frozen=True)
class ParameterSet:
    name: str = DEFAULT_PARAMS["name"]
    initial_users: float = DEFAULT_PARAMS["initial_users"]
    user_growth_rate: float = DEFAULT_PARAMS["user_growth_rate"]
    churn_rate: float = DEFAULT_PARAMS["churn_rate"]
    monthly_active_users: float = DEFAULT_PARAMS["monthly_active_users"]
    premium_subscription_price: float = DEFAULT_PARAMS["premium_subscription_price"]
    premium_conversion_rate: float = DEFAULT_PARAMS["premium_conversion_rate"]
    avg_nightly_rate: float = DEFAULT_PARAMS["avg_nightly_rate"]
    avg_booking_nights: float = DEFAULT_PARAMS["avg_booking_nights"]
    short_term_bookings_per_mau: float = DEFAULT_PARAMS["short_term_bookings_per_mau"]
    avg_monthly_lease_value: float = DEFAULT_PARAMS["avg_monthly_lease_value"]
    long_term_leases_per_mau: float = DEFAULT_PARAMS["long_term_leases_per_mau"]
    standard_landowner_fee: float = DEFAULT_PARAMS["standard_landowner_fee"]
    premium_landowner_fee: float = DEFAULT_PARAMS["premium_landowner_fee"]
    premium_landowner_ratio: float = DEFAULT_PARAMS["premium_landowner_ratio"]
    cac: float = DEFAULT_PARAMS["cac"]
    fixed_costs: float = DEFAULT_PARAMS["fixed_costs"]
    variable_cost_per_user: float = DEFAULT_PARAMS["variable_cost_per_user"]
    market_volatility: float = DEFAULT_PARAMS["market_volatility"]
    tax_rate: float = DEFAULT_PARAMS["tax_rate"]

    @classmethod
    def numeric_fields(cls):
        return [f.name for f in fields(cls) if f.name != "name"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["ParameterSet"] = None) -> "ParameterSet":
        """
        Build a ParameterSet from a loosely-typed dict (JSON body, preset file).

        Unknown keys are ignored; missing keys fall back to `base` (or the
        defaults). Numeric values are coerced with float(); anything that
        won't coerce, or coerces to nan/inf, raises ParameterError.
        """
        base = base or cls()
        changes: Dict[str, Any] = {}
        for key in cls.numeric_fields():
            if key not in data or data[key] is None:
                continue
            value = data[key]
            if isinstance(value, bool):
                raise ParameterError(f"{key} must be a number, got {value!r}")
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ParameterError(f"{key} must be a number, got {value!r}") from None
            if not math.isfinite(number):
                raise ParameterError(f"{key} must be finite, got {value!r}")
            changes[key] = number
        if data.get("name") is not None:
            changes["name"] = str(data["name"])
        return replace(base, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **changes) -> "ParameterSet":
        return replace(self, **changes)


@dataclass(frozen=True)
class ProjectionPoint:
    """
    One simulated month.

    `users` is rounded for display; `exact_users` carries the unrounded count
    into the next month so rounding error does not compound. Points rebuilt
    from an export have no exact count and continue from `users`.
    """
    month: int
    users: int
    revenue: float
    subscription_revenue: float
    service_fee_revenue: float
    costs: float
    profit: float
    exact_users: Optional[float] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "users": self.users,
            "revenue": self.revenue,
            "subscriptionRevenue": self.subscription_revenue,
            "serviceFeeRevenue": self.service_fee_revenue,
            "costs": self.costs,
            "profit": self.profit,
        }


@dataclass(frozen=True)
class AnnualPoint:
    year: int
    month: int
    users: int
    revenue: float
    subscription_revenue: float
    service_fee_revenue: float
    costs: float
    profit: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "users": self.users,
            "revenue": self.revenue,
            "subscriptionRevenue": self.subscription_revenue,
            "serviceFeeRevenue": self.service_fee_revenue,
            "costs": self.costs,
            "profit": self.profit,
        }


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class KPISummary:
    cac: float
    ltv: float
    ratio: float
    break_even_month: int

    @property
    def break_even_label(self) -> str:
        if self.break_even_month == BREAK_EVEN_NEVER:
            return "N/A"
        return f"Month {self.break_even_month}"

    def to_dict(self) -> Dict[str, Any]:
        # Infinity is not valid JSON
        return {
            "cac": self.cac,
            "ltv": _finite_or_none(self.ltv),
            "ratio": _finite_or_none(self.ratio),
            "ltv_infinite": math.isinf(self.ltv),
            "ratio_infinite": math.isinf(self.ratio),
            "break_even_month": self.break_even_month,
            "break_even_label": self.break_even_label,
        }


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    parameters: ParameterSet
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parameters": self.parameters.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preset":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            parameters=ParameterSet.from_dict(data.get("parameters") or {}),
            created_at=str(data["created_at"]),
        )
