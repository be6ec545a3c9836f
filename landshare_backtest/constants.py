"""
Constants and scenario presets for the Landshare backtest simulator.

All percentage parameters are entered as percentages (5 means 5%) and are
divided by 100 inside the engine. Money is USD.
"""

MAX_MONTHS = 60  # 5 years
MONTHS_PER_YEAR = 12

BREAK_EVEN_NEVER = -1

DEFAULT_PARAMS = {
    "name": "Default",
    # Growth
    "initial_users": 100,
    "user_growth_rate": 5,        # % per month
    "churn_rate": 2,              # % per month
    "monthly_active_users": 80,   # % of total users
    # Subscriptions
    "premium_subscription_price": 5,   # $/month
    "premium_conversion_rate": 2,      # % of total users
    # Marketplace, short-term
    "avg_nightly_rate": 45,
    "avg_booking_nights": 3,
    "short_term_bookings_per_mau": 0.05,
    # Marketplace, long-term
    "avg_monthly_lease_value": 350,
    "long_term_leases_per_mau": 0.01,
    # Fees
    "standard_landowner_fee": 2.0,     # %
    "premium_landowner_fee": 0.49,     # %
    "premium_landowner_ratio": 10,     # % of booking volume
    # Costs
    "cac": 0.5,                        # $ per new user
    "fixed_costs": 500,                # $/month
    "variable_cost_per_user": 0.05,    # $/month per user
    # Market / tax
    "market_volatility": 0,            # %
    "tax_rate": 25,                    # %
}

# Read-only reference points, loadable like stored presets but never persisted
SCENARIOS = {
    "default": {
        "id": "default",
        "title": "Default",
        "description": "Modest organic growth with a small premium tier and light marketplace activity.",
        "params": dict(DEFAULT_PARAMS),
    },
    "aggressive": {
        "id": "aggressive",
        "title": "Aggressive Growth",
        "description": "Heavy paid acquisition drives fast user growth at the cost of high burn.",
        "params": {
            **DEFAULT_PARAMS,
            "name": "Aggressive Growth",
            "user_growth_rate": 20,
            "premium_conversion_rate": 3,
            "fixed_costs": 2000,
            "cac": 1.5,
            "market_volatility": 10,
        },
    },
    "bootstrap": {
        "id": "bootstrap",
        "title": "Lean Bootstrapping",
        "description": "Slow word-of-mouth growth on a shoestring budget.",
        "params": {
            **DEFAULT_PARAMS,
            "name": "Lean Bootstrapping",
            "user_growth_rate": 2,
            "premium_conversion_rate": 1,
            "fixed_costs": 150,
            "cac": 0.1,
        },
    },
    "subscription": {
        "id": "subscription",
        "title": "Subscription-Focused",
        "description": "Revenue comes mostly from premium memberships; bookings are incidental.",
        "params": {
            **DEFAULT_PARAMS,
            "name": "Subscription-Focused",
            "premium_subscription_price": 12,
            "premium_conversion_rate": 8,
            "short_term_bookings_per_mau": 0.02,
            "long_term_leases_per_mau": 0.005,
            "premium_landowner_ratio": 30,
        },
    },
    "marketplace": {
        "id": "marketplace",
        "title": "Marketplace-Focused",
        "description": "High booking and lease volume with a thin premium tier; fees carry the business.",
        "params": {
            **DEFAULT_PARAMS,
            "name": "Marketplace-Focused",
            "premium_subscription_price": 3,
            "premium_conversion_rate": 1,
            "short_term_bookings_per_mau": 0.2,
            "long_term_leases_per_mau": 0.04,
            "standard_landowner_fee": 3.0,
            "premium_landowner_fee": 0.99,
        },
    },
}

# Slider metadata for every numeric parameter
PARAM_SPECS = {
    "initial_users": {"label": "Initial Users", "min": 0, "max": 1000, "step": 10, "unit": ""},
    "user_growth_rate": {"label": "User Growth Rate", "min": 0, "max": 50, "step": 1, "unit": "%/mo"},
    "churn_rate": {"label": "Churn Rate", "min": 0, "max": 20, "step": 0.5, "unit": "%/mo"},
    "monthly_active_users": {"label": "MAU Rate", "min": 0, "max": 100, "step": 5, "unit": "% of total"},
    "premium_subscription_price": {"label": "Premium Price", "min": 0, "max": 100, "step": 1, "unit": "$/mo"},
    "premium_conversion_rate": {"label": "Premium Conversion", "min": 0, "max": 20, "step": 0.5, "unit": "% of users"},
    "avg_nightly_rate": {"label": "Avg Nightly Rate", "min": 0, "max": 500, "step": 5, "unit": "$"},
    "avg_booking_nights": {"label": "Avg Booking Nights", "min": 0, "max": 30, "step": 1, "unit": "nights"},
    "short_term_bookings_per_mau": {"label": "Short-Term Bookings", "min": 0, "max": 1, "step": 0.01, "unit": "per MAU/mo"},
    "avg_monthly_lease_value": {"label": "Avg Monthly Lease", "min": 0, "max": 5000, "step": 50, "unit": "$/mo"},
    "long_term_leases_per_mau": {"label": "Long-Term Leases", "min": 0, "max": 0.5, "step": 0.005, "unit": "per MAU/mo"},
    "standard_landowner_fee": {"label": "Standard Landowner Fee", "min": 0, "max": 10, "step": 0.01, "unit": "%"},
    "premium_landowner_fee": {"label": "Premium Landowner Fee", "min": 0, "max": 10, "step": 0.01, "unit": "%"},
    "premium_landowner_ratio": {"label": "Premium Landowner Share", "min": 0, "max": 100, "step": 1, "unit": "% of volume"},
    "cac": {"label": "Acquisition Cost", "min": 0, "max": 50, "step": 0.1, "unit": "$/user"},
    "fixed_costs": {"label": "Fixed Costs", "min": 0, "max": 10000, "step": 100, "unit": "$/mo"},
    "variable_cost_per_user": {"label": "Variable Cost", "min": 0, "max": 5, "step": 0.01, "unit": "$/user/mo"},
    "market_volatility": {"label": "Market Volatility", "min": 0, "max": 50, "step": 1, "unit": "%"},
    "tax_rate": {"label": "Tax Rate", "min": 0, "max": 50, "step": 1, "unit": "%"},
}

# Playback tick intervals (ms)
SPEEDS = {
    "slow": 1000,
    "normal": 500,
    "fast": 200,
    "very_fast": 50,
}
DEFAULT_SPEED_MS = SPEEDS["normal"]

GRANULARITIES = ("monthly", "annual")

# Exact export schema, in order
EXPORT_FIELDS = (
    "month", "users", "revenue", "subscriptionRevenue",
    "serviceFeeRevenue", "costs", "profit",
)
