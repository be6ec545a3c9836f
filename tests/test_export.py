import csv
import io
import json
import re

import pytest

from landshare_backtest import (
    ParameterSet, build_history, history_to_json, history_to_csv, export_filename,
)
from landshare_backtest.constants import EXPORT_FIELDS


@pytest.fixture
def history():
    return build_history(ParameterSet(market_volatility=10), seed=5)


def test_json_round_trip(history):
    data = json.loads(history_to_json(history))

    assert isinstance(data, list)
    assert len(data) == 60
    for item, point in zip(data, history):
        assert set(item) == set(EXPORT_FIELDS)
        assert item["month"] == point.month
        assert item["users"] == point.users
        assert item["revenue"] == point.revenue
        assert item["subscriptionRevenue"] == point.subscription_revenue
        assert item["serviceFeeRevenue"] == point.service_fee_revenue
        assert item["costs"] == point.costs
        assert item["profit"] == point.profit


def test_internal_user_count_not_exported(history):
    assert "exact_users" not in history_to_json(history)


def test_csv(history):
    rows = list(csv.DictReader(io.StringIO(history_to_csv(history))))
    assert len(rows) == 60
    assert list(rows[0]) == list(EXPORT_FIELDS)
    assert int(rows[-1]["month"]) == 60
    assert float(rows[0]["profit"]) == history[0].profit


def test_export_filename():
    assert export_filename("json", timestamp_ms=1700000000000) == "landshare_backtest_1700000000000.json"
    assert re.fullmatch(r"landshare_backtest_\d+\.csv", export_filename("csv"))
