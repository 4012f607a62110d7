"""Settings for the mention engine, loaded from JSON.

Three-level precedence: overrides > project settings > global settings.
Keys are camelCase, as in the other pi settings files.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pi.mention.directory import FALLBACK_CANDIDATES, DirectoryUser
from pi.mention.keybindings import MentionKeybindingsConfig
from pi.mention.types import Candidate

CONFIG_DIR_NAME = ".pi"
PROJECT_SETTINGS_FILE = "mention.json"

DEFAULT_AUTOCOMPLETE_MAX_VISIBLE = 5
DEFAULT_FETCH_TIMEOUT = 10.0


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    Nested dicts merge; anything else is replaced. None values are skipped.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


class SettingsManager:
    """Read-only view over merged mention settings.

    Use ``create`` or ``in_memory`` rather than the constructor.
    """

    def __init__(
        self,
        *,
        settings_path: str | None,
        project_settings_path: str | None,
        initial_settings: dict[str, Any],
        load_error: Exception | None = None,
    ) -> None:
        self._settings_path = settings_path
        self._project_settings_path = project_settings_path
        self._global_settings = dict(initial_settings)
        self._load_error = load_error
        self._overrides: dict[str, Any] = {}
        self._settings = self._merge()

    @classmethod
    def create(cls, cwd: str, config_dir: str | None = None) -> SettingsManager:
        """Settings from ``<config_dir>/settings.json`` and ``<cwd>/.pi/mention.json``."""
        cdir = config_dir or _default_config_dir()
        settings_path = os.path.join(cdir, "settings.json")
        project_settings_path = os.path.join(cwd, CONFIG_DIR_NAME, PROJECT_SETTINGS_FILE)

        settings, error = _load_from_file(settings_path)
        return cls(
            settings_path=settings_path,
            project_settings_path=project_settings_path,
            initial_settings=settings,
            load_error=error,
        )

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        return cls(
            settings_path=None,
            project_settings_path=None,
            initial_settings=settings or {},
        )

    def _merge(self) -> dict[str, Any]:
        project: dict[str, Any] = {}
        if self._project_settings_path:
            project, _ = _load_from_file(self._project_settings_path)
        merged = deep_merge_settings(self._global_settings, project)
        return deep_merge_settings(merged, self._overrides)

    def reload(self) -> None:
        if self._settings_path:
            self._global_settings, self._load_error = _load_from_file(self._settings_path)
        self._settings = self._merge()

    def apply_overrides(self, overrides: dict[str, Any]) -> None:
        self._overrides = deep_merge_settings(self._overrides, overrides)
        self._settings = self._merge()

    @property
    def settings(self) -> dict[str, Any]:
        return self._settings

    @property
    def load_error(self) -> Exception | None:
        return self._load_error

    # --- Getters ---

    def get_autocomplete_max_visible(self) -> int:
        value = self._settings.get("autocompleteMaxVisible")
        if value is None:
            return DEFAULT_AUTOCOMPLETE_MAX_VISIBLE
        return max(3, min(20, int(value)))

    def get_directory_url(self) -> str | None:
        return self._settings.get("directoryUrl") or None

    def get_fetch_timeout(self) -> float:
        value = self._settings.get("fetchTimeout")
        return float(value) if value else DEFAULT_FETCH_TIMEOUT

    def get_fallback_candidates(self) -> list[Candidate]:
        """Configured fallback users, or the built-in list if unset or invalid."""
        records = self._settings.get("fallbackCandidates")
        if not isinstance(records, list) or not records:
            return list(FALLBACK_CANDIDATES)
        try:
            users = [DirectoryUser.model_validate(r) for r in records]
        except ValidationError:
            return list(FALLBACK_CANDIDATES)
        candidates = [u.to_candidate() for u in users if u.name.strip()]
        return candidates or list(FALLBACK_CANDIDATES)

    def get_keybindings(self) -> MentionKeybindingsConfig:
        value = self._settings.get("keybindings")
        return dict(value) if isinstance(value, dict) else {}


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        settings = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError(f"Settings file {path} does not contain a JSON object")
    return settings, None


def _default_config_dir() -> str:
    """Default config directory (~/.pi/mention)."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, "mention")
