import pytest

from landshare_backtest import BacktestSession, ParameterError, ParameterSet, PresetStoreError, SCENARIOS


def test_builds_on_construction(session):
    assert len(session.history) == 60
    assert len(session.annual) == 5
    assert session.kpis.cac == session.params.cac


def test_param_change_rebuilds_but_keeps_cursor(session):
    for _ in range(10):
        session.playback.step()
    before = session.history[10]

    session.update_params(fixed_costs=2000)

    assert session.playback.current_month == 10
    assert session.history[10].month == before.month
    assert session.history[10].costs == pytest.approx(before.costs + 1500, abs=0.011)
    assert session.params.fixed_costs == 2000


def test_update_params_coerces_strings(session):
    session.update_params(churn_rate="3.5")
    assert session.params.churn_rate == 3.5


def test_update_params_rejects_garbage(session):
    with pytest.raises(ParameterError):
        session.update_params(churn_rate="lots")
    assert session.params.churn_rate == 2


def test_update_params_ignores_unknown_keys(session):
    session.update_params(not_a_param=1, tax_rate=10)
    assert session.params.tax_rate == 10


class TestScenarios:
    def test_load_scenario_resets_playback(self, session):
        session.playback.step()
        scenario = session.load_scenario("aggressive")
        assert scenario["title"] == "Aggressive Growth"
        assert session.params.user_growth_rate == 20
        assert session.scenario_id == "aggressive"
        assert session.playback.current_month == 0

    def test_unknown_scenario(self, session):
        with pytest.raises(KeyError):
            session.load_scenario("moonshot")

    def test_every_scenario_loads(self, session):
        for scenario_id in SCENARIOS:
            session.load_scenario(scenario_id)
            assert len(session.history) == 60

    def test_param_edit_clears_scenario(self, session):
        session.load_scenario("bootstrap")
        session.update_params(cac=2)
        assert session.scenario_id is None


class TestDisplayedHistory:
    def test_monthly_slice_follows_cursor(self, session):
        assert len(session.displayed_history()) == 1
        session.playback.step()
        session.playback.step()
        displayed = session.displayed_history()
        assert [p.month for p in displayed] == [1, 2, 3]

    def test_annual_shows_everything(self, session):
        session.playback.set_granularity("annual")
        displayed = session.displayed_history()
        assert len(displayed) == 5
        assert displayed == session.annual

    def test_state_snapshot(self, session):
        state = session.get_state()
        assert state["playback"]["current_month"] == 0
        assert state["current_point"]["month"] == 1
        assert state["params"]["name"] == "Default"
        assert state["kpis"]["break_even_month"] == -1
        assert len(state["displayed"]) == 1


class TestPresets:
    def test_save_load_delete(self, session):
        session.update_params(user_growth_rate=15)
        preset = session.save_preset("Fast")
        assert [p.id for p in session.presets] == [preset.id]

        session.update_params(user_growth_rate=1)
        session.playback.step()
        session.load_preset(preset.id)
        assert session.params.user_growth_rate == 15
        assert session.playback.current_month == 0

        session.delete_preset(preset.id)
        assert session.presets == []

    def test_load_unknown_preset(self, session):
        with pytest.raises(KeyError):
            session.load_preset("missing")

    def test_failed_refresh_empties_list(self, session, preset_store):
        session.save_preset("Soon broken")
        preset_store.path.write_text("garbage")
        message = session.refresh_presets()
        assert message
        assert session.presets == []

    def test_failed_save_leaves_state(self, session, preset_store):
        preset_store.path.parent.mkdir(parents=True, exist_ok=True)
        preset_store.path.write_text("garbage")
        params = session.params
        with pytest.raises(PresetStoreError):
            session.save_preset("Nope")
        assert session.params is params

    def test_no_store(self):
        s = BacktestSession(params=ParameterSet())
        assert s.refresh_presets() is None
        with pytest.raises(PresetStoreError):
            s.save_preset("x")
        s.close()


@pytest.mark.parametrize("value", ["inf", "-inf", "nan", float("inf")])
def test_non_finite_values_rejected(session, value):
    history = session.history
    with pytest.raises(ParameterError):
        session.update_params(churn_rate=value)
    assert session.params.churn_rate == 2
    assert session.history is history

    session.update_params(churn_rate=4)
    assert session.params.churn_rate == 4


def test_failed_rebuild_keeps_previous_state(session):
    params, history, kpis = session.params, session.history, session.kpis
    with pytest.raises((ValueError, OverflowError)):
        session.set_params(ParameterSet(churn_rate=float("inf")))
    assert session.params is params
    assert session.history is history
    assert session.kpis is kpis

    session.update_params(fixed_costs=600)
    assert session.params.fixed_costs == 600
