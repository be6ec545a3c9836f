import pytest

from landshare_backtest import (
    BacktestModel, ParameterSet, MAX_MONTHS, build_history, build_annual,
)
from landshare_backtest.model import HISTORY_COLUMNS


class TestBuildHistory:
    def test_length_is_horizon(self, default_params):
        assert len(build_history(default_params)) == MAX_MONTHS == 60

    def test_months_are_sequential(self, default_params):
        history = build_history(default_params)
        assert [p.month for p in history] == list(range(1, 61))

    def test_deterministic_without_volatility(self, default_params):
        assert default_params.market_volatility == 0
        assert build_history(default_params) == build_history(default_params)

    def test_same_seed_reproduces_volatile_run(self):
        params = ParameterSet(market_volatility=25)
        assert build_history(params, seed=42) == build_history(params, seed=42)

    def test_different_seeds_diverge(self):
        params = ParameterSet(initial_users=10_000, market_volatility=25)
        assert build_history(params, seed=1) != build_history(params, seed=2)

    def test_regenerates_from_month_one(self, default_params):
        history = build_history(default_params)
        changed = build_history(default_params.replace(fixed_costs=900))
        assert changed[0].month == 1
        assert changed[0].costs == pytest.approx(history[0].costs + 400)
        assert [p.users for p in changed] == [p.users for p in history]

    def test_custom_length(self, default_params):
        assert len(build_history(default_params, months=6)) == 6


class TestBacktestModel:
    def test_datacollector_matches_points(self, default_params):
        model = BacktestModel(default_params, seed=3)
        points = model.run()
        history = model.get_history()

        assert list(history.keys()) == HISTORY_COLUMNS
        assert history["month"] == list(range(1, 61))
        assert history["users"] == [p.users for p in points]
        assert history["profit"] == pytest.approx([p.profit for p in points])
        assert model.current_month == 60

    def test_empty_history_before_first_step(self, default_params):
        model = BacktestModel(default_params)
        assert model.current_month == 0
        assert model.get_history() == {col: [] for col in HISTORY_COLUMNS}

    def test_step_advances_one_month(self, default_params):
        model = BacktestModel(default_params)
        model.step()
        model.step()
        assert model.current_month == 2
        assert len(model.points) == 2


class TestBuildAnnual:
    def test_five_years(self, default_params):
        annual = build_annual(build_history(default_params))
        assert len(annual) == 5
        assert [a.year for a in annual] == [1, 2, 3, 4, 5]
        assert [a.month for a in annual] == [12, 24, 36, 48, 60]

    def test_flows_summed_stocks_taken_at_year_end(self):
        params = ParameterSet(market_volatility=15)
        history = build_history(params, seed=9)
        annual = build_annual(history)

        for a in annual:
            chunk = history[(a.year - 1) * 12:a.year * 12]
            assert a.users == chunk[-1].users
            assert a.revenue == pytest.approx(sum(p.revenue for p in chunk), abs=0.01)
            assert a.subscription_revenue == pytest.approx(sum(p.subscription_revenue for p in chunk), abs=0.01)
            assert a.service_fee_revenue == pytest.approx(sum(p.service_fee_revenue for p in chunk), abs=0.01)
            assert a.costs == pytest.approx(sum(p.costs for p in chunk), abs=0.01)
            assert a.profit == pytest.approx(sum(p.profit for p in chunk), abs=0.01)

    def test_partial_final_year(self, default_params):
        history = build_history(default_params, months=30)
        annual = build_annual(history)
        assert len(annual) == 3
        assert annual[-1].month == 30
        assert annual[-1].users == history[-1].users
        assert annual[-1].revenue == pytest.approx(sum(p.revenue for p in history[24:]), abs=0.01)

    def test_empty_history(self):
        assert build_annual([]) == []

    def test_to_dict_keys(self, default_params):
        annual = build_annual(build_history(default_params))
        assert set(annual[0].to_dict()) == {
            "year", "month", "users", "revenue", "subscriptionRevenue",
            "serviceFeeRevenue", "costs", "profit",
        }
