"""
Preset store: named parameter sets persisted to a single JSON file.

The store is the authority; callers re-list after every mutation. Every
failure surfaces as PresetStoreError with a message fit for a toast, and a
failed write leaves the file as it was.
"""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

from .records import ParameterSet, Preset

logger = logging.getLogger(__name__)


class PresetStoreError(Exception):
    """Preset could not be listed, saved or deleted."""


class PresetNotFoundError(PresetStoreError):
    pass


class JsonPresetStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    # =========================================================================
    # Public API
    # =========================================================================

    def list(self) -> List[Preset]:
        """All presets, newest first."""
        presets = self._read()
        return sorted(presets, key=lambda p: p.created_at, reverse=True)

    def create(self, name: str, parameters: ParameterSet) -> Preset:
        name = (name or "").strip()
        if not name:
            raise PresetStoreError("Preset name cannot be empty")

        presets = self._read()
        preset = Preset(
            id=uuid.uuid4().hex,
            name=name,
            parameters=parameters.replace(name=name),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        presets.append(preset)
        self._write(presets)
        logger.info("Saved preset %r (%s)", preset.name, preset.id)
        return preset

    def delete(self, preset_id: str) -> None:
        presets = self._read()
        remaining = [p for p in presets if p.id != preset_id]
        if len(remaining) == len(presets):
            raise PresetNotFoundError(f"Preset not found: {preset_id}")
        self._write(remaining)
        logger.info("Deleted preset %s", preset_id)

    # =========================================================================
    # File I/O
    # =========================================================================

    def _read(self) -> List[Preset]:
        if not self.path.exists():
            return []
        try:
            with open(self.path) as f:
                data = json.load(f)
            return [Preset.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PresetStoreError(f"Could not read presets from {self.path}: {e}") from e

    def _write(self, presets: List[Preset]) -> None:
        payload = [p.to_dict() for p in presets]
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".presets-", suffix=".json")
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PresetStoreError(f"Could not write presets to {self.path}: {e}") from e
