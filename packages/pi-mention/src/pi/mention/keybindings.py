"""Keybindings for the mention edit surface."""

from __future__ import annotations

from typing import Literal

from pi.mention.keys import KeyId, matches_key

MentionAction = Literal[
    # Caret movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    # Text input
    "newLine",
    "submit",
    # Dropdown
    "selectUp",
    "selectDown",
    "selectConfirm",
    "selectCancel",
    "openPicker",
]

MentionKeybindingsConfig = dict[MentionAction, KeyId | list[KeyId]]

DEFAULT_MENTION_KEYBINDINGS: dict[MentionAction, KeyId | list[KeyId]] = {
    # Caret movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    # Text input
    "newLine": "shift+enter",
    "submit": "enter",
    # Dropdown
    "selectUp": "up",
    "selectDown": "down",
    "selectConfirm": ["enter", "tab"],
    "selectCancel": "escape",
    "openPicker": "ctrl+o",
}


class MentionKeybindingsManager:
    """Maps raw key input to edit-surface actions."""

    def __init__(self, config: MentionKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[MentionAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: MentionKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_MENTION_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # User overrides replace the default keys for that action
        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: MentionAction) -> bool:
        """Check if input matches a specific action."""
        return any(matches_key(data, key) for key in self._action_to_keys.get(action, []))

    def get_keys(self, action: MentionAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: MentionKeybindingsConfig) -> None:
        self._build_maps(config)


_global_keybindings: MentionKeybindingsManager | None = None


def get_mention_keybindings() -> MentionKeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = MentionKeybindingsManager()
    return _global_keybindings


def set_mention_keybindings(manager: MentionKeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
