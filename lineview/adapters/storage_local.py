from __future__ import annotations

import json
import os
from typing import Any, Dict

from lineview.domain.settings import SettingsConfig

SETTINGS_FILE = "settings.json"


class StorageLocal:
    """Local filesystem storage for panel settings (JSON)."""

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILE)

    def save_settings(self, settings: SettingsConfig) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.settings_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, ensure_ascii=False, indent=2)

    def load_settings(self) -> SettingsConfig:
        """Return persisted settings, or defaults when no file exists yet."""
        raw = self._load_raw()
        return SettingsConfig.from_mapping(raw) if raw else SettingsConfig()

    def _load_raw(self) -> Dict[str, Any]:
        if not os.path.exists(self.settings_path):
            return {}
        with open(self.settings_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.settings_path}: expected a JSON object.")
        return data
