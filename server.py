"""
Flask server for the Landshare Backtest Simulator

Flat file — no blueprints.

Endpoints:
  GET    /api/state                      Params + playback + KPIs + displayed points
  GET    /api/defaults                   Default params
  GET    /api/param-specs                Slider metadata
  POST   /api/params                     Partial/complete param update (rebuilds history)
  GET    /api/history?granularity=       Full monthly or annual series
  GET    /api/kpis                       CAC, LTV, LTV:CAC, break-even month
  POST   /api/playback/<command>         start | pause | step | reset
  POST   /api/playback/speed             {"speed_ms": 200} or {"speed": "fast"}
  POST   /api/playback/granularity       {"granularity": "monthly" | "annual"}
  GET    /api/scenarios                  Built-in scenarios
  POST   /api/scenario                   Load built-in scenario by id
  GET    /api/presets                    List saved presets
  POST   /api/presets                    Save current params as {"name": ...}
  POST   /api/presets/<id>/load          Load a saved preset
  DELETE /api/presets/<id>               Delete a saved preset
  GET    /api/export/json                Monthly history download
  GET    /api/export/csv                 Monthly history download (CSV)
"""

import os
import logging

from flask import Flask, jsonify, request

from landshare_backtest import (
    BacktestSession, JsonPresetStore, PresetStoreError, PresetNotFoundError, ParameterError,
    DEFAULT_PARAMS, PARAM_SPECS, SCENARIOS, SPEEDS,
    history_to_json, history_to_csv, export_filename,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)

PRESETS_PATH = os.environ.get("PRESETS_PATH", "presets/presets.json")

# Global session (stateful — one simulator per server)
_session: BacktestSession = None


def _env_seed():
    value = os.environ.get("BACKTEST_SEED")
    return int(value) if value else None


def get_session() -> BacktestSession:
    global _session
    if _session is None:
        _session = BacktestSession(store=JsonPresetStore(PRESETS_PATH), seed=_env_seed())
        error = _session.refresh_presets()
        if error:
            logger.warning("Starting with empty preset list: %s", error)
    return _session


def reset_session(session: BacktestSession = None) -> BacktestSession:
    """Swap in a session. With None, the next request builds one from the environment."""
    global _session
    if _session is not None:
        _session.close()
    _session = session
    return _session


def _error(message: str, status: int):
    return jsonify({"error": message}), status


# =============================================================================
# Parameters & results
# =============================================================================

@app.route("/api/state")
def api_state():
    return jsonify(get_session().get_state())


@app.route("/api/defaults")
def api_defaults():
    return jsonify(DEFAULT_PARAMS)


@app.route("/api/param-specs")
def api_param_specs():
    return jsonify(PARAM_SPECS)


@app.route("/api/params", methods=["POST"])
def api_params():
    """Update params. History and KPIs are rebuilt; the cursor stays put."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return _error("Expected a JSON object of parameter values", 400)
    s = get_session()
    try:
        s.update_params(**data)
    except ParameterError as e:
        return _error(str(e), 400)
    return jsonify(s.get_state())


@app.route("/api/history")
def api_history():
    s = get_session()
    granularity = request.args.get("granularity", "monthly")
    if granularity == "annual":
        return jsonify([p.to_dict() for p in s.annual])
    if granularity != "monthly":
        return _error(f"Unknown granularity: {granularity}", 400)
    return jsonify([p.to_dict() for p in s.history])


@app.route("/api/kpis")
def api_kpis():
    return jsonify(get_session().kpis.to_dict())


# =============================================================================
# Playback
# =============================================================================

PLAYBACK_COMMANDS = {"start", "pause", "step", "reset"}


@app.route("/api/playback/<command>", methods=["POST"])
def api_playback(command: str):
    if command not in PLAYBACK_COMMANDS:
        return _error(f"Unknown playback command: {command}", 404)
    s = get_session()
    getattr(s.playback, command)()
    return jsonify(s.get_state())


@app.route("/api/playback/speed", methods=["POST"])
def api_playback_speed():
    data = request.get_json(silent=True) or {}
    s = get_session()
    if "speed" in data:
        if data["speed"] not in SPEEDS:
            return _error(f"Unknown speed: {data['speed']}", 400)
        speed_ms = SPEEDS[data["speed"]]
    else:
        speed_ms = data.get("speed_ms")
    try:
        s.playback.set_speed(speed_ms)
    except (TypeError, ValueError) as e:
        return _error(f"Invalid speed: {e}", 400)
    return jsonify(s.get_state())


@app.route("/api/playback/granularity", methods=["POST"])
def api_playback_granularity():
    data = request.get_json(silent=True) or {}
    s = get_session()
    try:
        s.playback.set_granularity(data.get("granularity"))
    except ValueError as e:
        return _error(str(e), 400)
    return jsonify(s.get_state())


# =============================================================================
# Scenarios & presets
# =============================================================================

@app.route("/api/scenarios")
def api_scenarios():
    """List all built-in scenarios."""
    return jsonify([
        {"id": s["id"], "title": s["title"], "description": s["description"], "params": s["params"]}
        for s in SCENARIOS.values()
    ])


@app.route("/api/scenario", methods=["POST"])
def api_scenario():
    """Load a built-in scenario by id."""
    data = request.get_json(silent=True) or {}
    scenario_id = data.get("id", "default")
    s = get_session()
    try:
        scenario = s.load_scenario(scenario_id)
    except KeyError:
        return jsonify({"error": f"Unknown scenario: {scenario_id}", "available": list(SCENARIOS)}), 404
    return jsonify({
        "scenario": scenario["id"],
        "title": scenario["title"],
        "description": scenario["description"],
        "state": s.get_state(),
    })


@app.route("/api/presets", methods=["GET"])
def api_presets():
    s = get_session()
    error = s.refresh_presets()
    if error:
        return _error(error, 500)
    return jsonify([p.to_dict() for p in s.presets])


@app.route("/api/presets", methods=["POST"])
def api_presets_save():
    data = request.get_json(silent=True) or {}
    name = str(data.get("name") or "").strip()
    if not name:
        return _error("Preset name is required", 400)
    s = get_session()
    try:
        preset = s.save_preset(name)
    except PresetStoreError as e:
        logger.warning("Saving preset failed: %s", e)
        return _error(str(e), 500)
    return jsonify({"message": f"Preset '{preset.name}' saved", "preset": preset.to_dict()}), 201


@app.route("/api/presets/<preset_id>/load", methods=["POST"])
def api_presets_load(preset_id: str):
    s = get_session()
    try:
        preset = s.load_preset(preset_id)
    except KeyError:
        return _error(f"Preset not found: {preset_id}", 404)
    return jsonify({"message": f"Preset '{preset.name}' loaded", "state": s.get_state()})


@app.route("/api/presets/<preset_id>", methods=["DELETE"])
def api_presets_delete(preset_id: str):
    s = get_session()
    try:
        s.delete_preset(preset_id)
    except PresetNotFoundError as e:
        return _error(str(e), 404)
    except PresetStoreError as e:
        logger.warning("Deleting preset failed: %s", e)
        return _error(str(e), 500)
    return jsonify({"message": "Preset deleted"})


# =============================================================================
# Export
# =============================================================================

@app.route("/api/export/json")
def api_export_json():
    """Full 60-month history as a bare JSON array."""
    return history_to_json(get_session().history), 200, {
        "Content-Type": "application/json",
        "Content-Disposition": f"attachment; filename={export_filename('json')}",
    }


@app.route("/api/export/csv")
def api_export_csv():
    return history_to_csv(get_session().history), 200, {
        "Content-Type": "text/csv",
        "Content-Disposition": f"attachment; filename={export_filename('csv')}",
    }


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    get_session()
    print("=" * 58)
    print("  Landshare Backtest Simulator")
    print("=" * 58)
    print()
    print("  API: http://localhost:5000/api/state")
    print()
    print("  Key endpoints:")
    print("    POST /api/params           Update parameters")
    print("    POST /api/playback/start   Animate month by month")
    print("    GET  /api/kpis             LTV, CAC, break-even")
    print("    GET  /api/export/json      Full history download")
    print()

    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "true").lower() == "true"
    app.run(debug=debug, host="0.0.0.0", port=port)
