"""
Pytest configuration and fixtures for the backtest simulator test suite.

Playback tests never sleep: the controller is built with a fake timer
factory whose timers are fired by hand.
"""

import pytest

from landshare_backtest import (
    BacktestSession, JsonPresetStore, ParameterSet, PlaybackController,
)


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.fired = True
        self.function()


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_next(self):
        active = self.active
        assert len(active) == 1, f"expected exactly one live timer, found {len(active)}"
        active[0].fire()


@pytest.fixture
def timer_factory():
    return FakeTimerFactory()


@pytest.fixture
def playback(timer_factory):
    controller = PlaybackController(timer_factory=timer_factory)
    yield controller
    controller.close()


@pytest.fixture
def default_params():
    return ParameterSet()


@pytest.fixture
def flat_params():
    """No growth, no churn, no volatility: easy numbers to check by hand."""
    return ParameterSet(
        name="Flat",
        initial_users=1000,
        user_growth_rate=0,
        churn_rate=0,
        monthly_active_users=100,
        premium_subscription_price=10,
        premium_conversion_rate=10,
        short_term_bookings_per_mau=0,
        long_term_leases_per_mau=0,
        cac=0,
        fixed_costs=0,
        variable_cost_per_user=0,
        market_volatility=0,
        tax_rate=25,
    )


@pytest.fixture
def preset_store(tmp_path):
    return JsonPresetStore(tmp_path / "presets" / "presets.json")


@pytest.fixture
def session(preset_store, timer_factory):
    s = BacktestSession(
        store=preset_store,
        playback=PlaybackController(timer_factory=timer_factory),
    )
    yield s
    s.close()


@pytest.fixture
def client(session):
    import server

    server.reset_session(session)
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c
    server.reset_session(None)
