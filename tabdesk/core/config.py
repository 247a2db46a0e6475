from typing import Any, Literal, Optional
import json
import os
from pydantic import BaseModel, Field, ValidationError, field_validator
from loguru import logger
from .events import ObserverEvent

# --- Settings Models ---
class GeneralSettings(BaseModel):
    debug_mode: bool = True
    log_dir: str = "logs"

class EditorSettings(BaseModel):
    default_view_mode: Literal["editor", "preview", "split"] = "split"
    # Placeholder shown in a tab whose document could not be read
    load_error_template: str = "Failed to load file: {error}"
    default_split_direction: Literal["horizontal", "vertical"] = "vertical"
    auto_unsplit_empty_pane: bool = False

    @field_validator("load_error_template")
    @classmethod
    def _template_takes_error(cls, value: str) -> str:
        try:
            value.format(error="")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"load_error_template may only use the {{error}} field: {e}") from e
        return value

class SessionSettings(BaseModel):
    session_file: str = "session.json"

class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    editor: EditorSettings = Field(default_factory=EditorSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

# --- Manager ---
class ConfigManager:
    """
    Manages application configuration with persistence and reactivity.

    Pass ``filepath=None`` for an in-memory configuration that is never
    written to disk (tests, embedding).
    """
    def __init__(self, filepath: Optional[str] = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = ObserverEvent("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        if not hasattr(self._data, section):
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        # Re-validate the whole section so Literal/typed fields reject bad values
        updated = type(section_obj).model_validate({**section_obj.model_dump(), key: value})
        setattr(self._data, section, updated)
        self._save()
        self.on_changed.emit(section, key, getattr(updated, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if self.filepath is None:
            return
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    import tomllib
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if self.filepath is None or self.filepath.endswith('.toml'):
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
