import json


def test_state(client):
    resp = client.get("/api/state")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["max_months"] == 60
    assert data["playback"]["is_running"] is False


def test_defaults_and_specs(client):
    assert client.get("/api/defaults").get_json()["initial_users"] == 100
    specs = client.get("/api/param-specs").get_json()
    assert specs["churn_rate"]["max"] == 20


class TestParams:
    def test_update(self, client):
        resp = client.post("/api/params", json={"user_growth_rate": 10})
        assert resp.status_code == 200
        assert resp.get_json()["params"]["user_growth_rate"] == 10

    def test_bad_value(self, client):
        resp = client.post("/api/params", json={"tax_rate": "high"})
        assert resp.status_code == 400
        assert "tax_rate" in resp.get_json()["error"]

    def test_non_finite_value_then_recovery(self, client):
        resp = client.post("/api/params", json={"churn_rate": "inf"})
        assert resp.status_code == 400
        assert "churn_rate" in resp.get_json()["error"]

        resp = client.post("/api/params", json={"churn_rate": 3})
        assert resp.status_code == 200
        assert resp.get_json()["params"]["churn_rate"] == 3

    def test_body_must_be_object(self, client):
        assert client.post("/api/params", json=[1]).status_code == 400
        assert client.post("/api/params", json="churn").status_code == 400


class TestHistory:
    def test_monthly(self, client):
        data = client.get("/api/history").get_json()
        assert len(data) == 60
        assert data[0]["month"] == 1

    def test_annual(self, client):
        data = client.get("/api/history?granularity=annual").get_json()
        assert [row["year"] for row in data] == [1, 2, 3, 4, 5]

    def test_unknown_granularity(self, client):
        assert client.get("/api/history?granularity=weekly").status_code == 400


def test_kpis_infinite_as_null(client):
    client.post("/api/params", json={"churn_rate": 0})
    data = client.get("/api/kpis").get_json()
    assert data["ltv"] is None
    assert data["ltv_infinite"] is True
    assert data["break_even_label"] == "N/A"


class TestPlayback:
    def test_start_and_pause(self, client, timer_factory):
        data = client.post("/api/playback/start").get_json()
        assert data["playback"]["is_running"] is True
        timer_factory.fire_next()
        data = client.post("/api/playback/pause").get_json()
        assert data["playback"]["is_running"] is False
        assert data["playback"]["current_month"] == 1
        assert len(data["displayed"]) == 2

    def test_step_and_reset(self, client):
        client.post("/api/playback/step")
        data = client.post("/api/playback/step").get_json()
        assert data["playback"]["current_month"] == 2
        data = client.post("/api/playback/reset").get_json()
        assert data["playback"]["current_month"] == 0

    def test_unknown_command(self, client):
        assert client.post("/api/playback/rewind").status_code == 404

    def test_speed(self, client):
        data = client.post("/api/playback/speed", json={"speed": "fast"}).get_json()
        assert data["playback"]["speed_ms"] == 200
        data = client.post("/api/playback/speed", json={"speed_ms": 75}).get_json()
        assert data["playback"]["speed_ms"] == 75

    def test_bad_speed(self, client):
        assert client.post("/api/playback/speed", json={"speed": "ludicrous"}).status_code == 400
        assert client.post("/api/playback/speed", json={"speed_ms": -5}).status_code == 400
        assert client.post("/api/playback/speed", json={}).status_code == 400

    def test_granularity(self, client):
        data = client.post("/api/playback/granularity", json={"granularity": "annual"}).get_json()
        assert data["playback"]["granularity"] == "annual"
        assert len(data["displayed"]) == 5
        assert client.post("/api/playback/granularity", json={"granularity": "daily"}).status_code == 400


class TestScenarios:
    def test_list(self, client):
        ids = [s["id"] for s in client.get("/api/scenarios").get_json()]
        assert ids == ["default", "aggressive", "bootstrap", "subscription", "marketplace"]

    def test_load(self, client):
        data = client.post("/api/scenario", json={"id": "marketplace"}).get_json()
        assert data["title"] == "Marketplace-Focused"
        assert data["state"]["params"]["short_term_bookings_per_mau"] == 0.2

    def test_unknown(self, client):
        resp = client.post("/api/scenario", json={"id": "nope"})
        assert resp.status_code == 404
        assert "default" in resp.get_json()["available"]


class TestPresets:
    def test_save_list_load_delete(self, client):
        client.post("/api/params", json={"fixed_costs": 1234})
        resp = client.post("/api/presets", json={"name": "Costly"})
        assert resp.status_code == 201
        preset_id = resp.get_json()["preset"]["id"]

        listed = client.get("/api/presets").get_json()
        assert [p["name"] for p in listed] == ["Costly"]

        client.post("/api/params", json={"fixed_costs": 1})
        data = client.post(f"/api/presets/{preset_id}/load").get_json()
        assert data["state"]["params"]["fixed_costs"] == 1234

        assert client.delete(f"/api/presets/{preset_id}").status_code == 200
        assert client.get("/api/presets").get_json() == []

    def test_name_required(self, client):
        assert client.post("/api/presets", json={"name": "  "}).status_code == 400

    def test_unknown_preset(self, client):
        assert client.post("/api/presets/missing/load").status_code == 404
        assert client.delete("/api/presets/missing").status_code == 404

    def test_store_failure_reported(self, client, preset_store):
        preset_store.path.parent.mkdir(parents=True, exist_ok=True)
        preset_store.path.write_text("garbage")
        resp = client.get("/api/presets")
        assert resp.status_code == 500
        assert "error" in resp.get_json()
        assert client.post("/api/presets", json={"name": "x"}).status_code == 500


class TestExport:
    def test_json(self, client):
        resp = client.get("/api/export/json")
        assert resp.status_code == 200
        assert "attachment; filename=landshare_backtest_" in resp.headers["Content-Disposition"]
        data = json.loads(resp.get_data(as_text=True))
        assert len(data) == 60
        assert set(data[0]) == {
            "month", "users", "revenue", "subscriptionRevenue", "serviceFeeRevenue", "costs", "profit",
        }

    def test_csv(self, client):
        resp = client.get("/api/export/csv")
        assert resp.headers["Content-Type"].startswith("text/csv")
        lines = resp.get_data(as_text=True).strip().splitlines()
        assert len(lines) == 61
