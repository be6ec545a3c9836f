"""
Backtest session: the single owner of all mutable simulator state.

Parameters in, everything else derived. Any parameter change regenerates the
whole history and the KPIs; the playback cursor is left where it is.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .constants import SCENARIOS
from .kpi import compute_kpis
from .model import build_history, build_annual
from .playback import PlaybackController
from .presets import JsonPresetStore, PresetStoreError
from .records import ParameterSet, ProjectionPoint, AnnualPoint, KPISummary, Preset

logger = logging.getLogger(__name__)


class BacktestSession:
    def __init__(
        self,
        params: Optional[ParameterSet] = None,
        store: Optional[JsonPresetStore] = None,
        playback: Optional[PlaybackController] = None,
        seed: Optional[int] = None,
    ):
        self.store = store
        self.playback = playback or PlaybackController()
        self.seed = seed
        self.presets: List[Preset] = []
        self.scenario_id: Optional[str] = None

        self.params: ParameterSet = None
        self.history: List[ProjectionPoint] = []
        self.annual: List[AnnualPoint] = []
        self.kpis: KPISummary = None
        self._rebuild(params or ParameterSet())

    # =========================================================================
    # Parameters
    # =========================================================================

    def set_params(self, params: ParameterSet) -> None:
        self._rebuild(params)
        self.scenario_id = None

    def update_params(self, **changes) -> None:
        """Apply a partial update; values are coerced like a request body."""
        self.set_params(ParameterSet.from_dict(changes, base=self.params))

    def load_scenario(self, scenario_id: str) -> Dict[str, Any]:
        if scenario_id not in SCENARIOS:
            raise KeyError(scenario_id)
        scenario = SCENARIOS[scenario_id]
        self.set_params(ParameterSet.from_dict(scenario["params"]))
        self.scenario_id = scenario_id
        self.playback.reset()
        return scenario

    def _rebuild(self, params: ParameterSet) -> None:
        # Derive everything first so a failure leaves the previous state intact
        history = build_history(params, seed=self.seed)
        annual = build_annual(history)
        kpis = compute_kpis(params, history)
        self.params, self.history, self.annual, self.kpis = params, history, annual, kpis

    # =========================================================================
    # Presets
    # =========================================================================

    def refresh_presets(self) -> Optional[str]:
        """Reload the preset list. Returns an error message on failure."""
        if self.store is None:
            self.presets = []
            return None
        try:
            self.presets = self.store.list()
        except PresetStoreError as e:
            logger.warning("Listing presets failed: %s", e)
            self.presets = []
            return str(e)
        return None

    def save_preset(self, name: str) -> Preset:
        preset = self._require_store().create(name, self.params)
        self.refresh_presets()
        return preset

    def delete_preset(self, preset_id: str) -> None:
        self._require_store().delete(preset_id)
        self.refresh_presets()

    def load_preset(self, preset_id: str) -> Preset:
        preset = next((p for p in self.presets if p.id == preset_id), None)
        if preset is None and self.store is not None:
            self.refresh_presets()
            preset = next((p for p in self.presets if p.id == preset_id), None)
        if preset is None:
            raise KeyError(preset_id)
        self.set_params(preset.parameters)
        self.playback.reset()
        return preset

    def _require_store(self) -> JsonPresetStore:
        if self.store is None:
            raise PresetStoreError("No preset store configured")
        return self.store

    # =========================================================================
    # Views
    # =========================================================================

    def displayed_history(self) -> List[Union[ProjectionPoint, AnnualPoint]]:
        if self.playback.granularity == "annual":
            return list(self.annual)
        return self.history[:self.playback.current_month + 1]

    def get_state(self) -> Dict[str, Any]:
        playback = self.playback.state
        current = self.history[playback.current_month] if self.history else None
        return {
            "params": self.params.to_dict(),
            "scenario_id": self.scenario_id,
            "seed": self.seed,
            "playback": playback.to_dict(),
            "current_point": current.to_dict() if current else None,
            "kpis": self.kpis.to_dict(),
            "displayed": [p.to_dict() for p in self.displayed_history()],
            "max_months": self.playback.max_months,
            "presets": [{"id": p.id, "name": p.name, "created_at": p.created_at} for p in self.presets],
        }

    def close(self) -> None:
        self.playback.close()
