from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List
from acemon.core.logging import logger
from acemon.core.errors import ValidationError
from acemon.system.tuning import EngineTuning

SETTINGS_FILENAME = ".acemon_settings.json"
SETTINGS_ENV = "ACEMON_SETTINGS"
DEFAULT_CONFIG_URL = "http://localhost:3000/api/engine"

@dataclass
class SettingsData:
    text_speed: int = 2            # 1 fast, 2 normal, 3 slow
    log_level: str = "WARN"        # DEBUG / INFO / WARN / ERROR
    debug: bool = False            # Verbose engine/debug prints
    remote_config: bool = True     # Fetch spawn rate & multipliers from the config endpoint
    config_url: str = DEFAULT_CONFIG_URL
    config_timeout: float = 2.0
    tuning: Dict[str, Any] = field(default_factory=dict)

    def normalize(self):
        if self.text_speed not in {1,2,3}:
            self.text_speed = 2
        if self.log_level not in {"DEBUG","INFO","WARN","ERROR"}:
            self.log_level = "WARN"
        try:
            self.config_timeout = float(self.config_timeout)
        except (TypeError, ValueError):
            self.config_timeout = 2.0
        if self.config_timeout <= 0:
            self.config_timeout = 2.0
        if not isinstance(self.tuning, dict):
            self.tuning = {}

    @property
    def pace(self) -> float:
        """Multiplier applied to engine pause tokens when replaying steps."""
        return {1: 0.25, 2: 0.5, 3: 1.0}[self.text_speed]

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        override = os.environ.get(SETTINGS_ENV)
        if override:
            return Path(override)
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls) -> "Settings":
        path = cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("settings root must be an object")
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data_kwargs = {name: raw[name] for name in field_names if name in raw}
                data = SettingsData(**data_kwargs)
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except Exception as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def tuning(self) -> EngineTuning:
        """Engine tuning with this file's overrides applied.

        Raises ValidationError for unknown keys or out-of-range values.
        """
        try:
            return EngineTuning.from_overrides(self.data.tuning)
        except ValidationError as e:
            logger.error("TuningRejected", path=str(self.path), error=str(e))
            raise

    def apply_log_level(self):
        logger.set_level(self.data.log_level)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2))
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def update(self, **changes: Any):
        for key, value in changes.items():
            if not hasattr(self.data, key):
                raise ValidationError(f"Unknown setting '{key}'")
            setattr(self.data, key, value)
        self.data.normalize()
        self.apply_log_level()
        self.save()
        self._notify()

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)
