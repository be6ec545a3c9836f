"""Landshare backtest simulator: marketplace economics projected month by month."""

from .constants import DEFAULT_PARAMS, SCENARIOS, PARAM_SPECS, SPEEDS, MAX_MONTHS
from .records import ParameterSet, ParameterError, ProjectionPoint, AnnualPoint, KPISummary, Preset
from .engine import project_month, seed_point, blended_service_fee_rate
from .model import BacktestModel, build_history, build_annual
from .kpi import compute_kpis, lifetime_value, break_even_month
from .playback import PlaybackController, PlaybackState
from .presets import JsonPresetStore, PresetStoreError, PresetNotFoundError
from .export import history_to_json, history_to_csv, export_filename
from .session import BacktestSession

__all__ = [
    "DEFAULT_PARAMS", "SCENARIOS", "PARAM_SPECS", "SPEEDS", "MAX_MONTHS",
    "ParameterSet", "ParameterError", "ProjectionPoint", "AnnualPoint", "KPISummary", "Preset",
    "project_month", "seed_point", "blended_service_fee_rate",
    "BacktestModel", "build_history", "build_annual",
    "compute_kpis", "lifetime_value", "break_even_month",
    "PlaybackController", "PlaybackState",
    "JsonPresetStore", "PresetStoreError", "PresetNotFoundError",
    "history_to_json", "history_to_csv", "export_filename",
    "BacktestSession",
]
