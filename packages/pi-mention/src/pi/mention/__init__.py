"""pi-mention: "@" mention editing engine for note inputs."""

# Candidate directory
from pi.mention.directory import (
    FALLBACK_CANDIDATES,
    CandidateDirectory,
    CandidateFetcher,
    DirectoryError,
    DirectoryUser,
    HttpCandidateFetcher,
    parse_directory_payload,
)

# Editor state machine
from pi.mention.editor import EditorState, MentionEditor, classify
from pi.mention.filter import filter_candidates

# Edit surface
from pi.mention.input import MentionInput, MentionInputTheme
from pi.mention.keybindings import (
    DEFAULT_MENTION_KEYBINDINGS,
    MentionAction,
    MentionKeybindingsConfig,
    MentionKeybindingsManager,
    get_mention_keybindings,
    set_mention_keybindings,
)
from pi.mention.keys import KeyId, matches_key
from pi.mention.locator import locate
from pi.mention.mention_set import MentionSet
from pi.mention.navigation import DropdownTheme, NavigationController

# Session and settings
from pi.mention.session import NoteSession, SubmitSink
from pi.mention.settings import SettingsManager
from pi.mention.trigger import detect

# Types
from pi.mention.types import (
    Candidate,
    CaretContext,
    DeleteDirection,
    EditResult,
    MentionRef,
    MentionToken,
    NotePayload,
    TriggerContext,
)

__all__ = [
    # Candidate directory
    "FALLBACK_CANDIDATES",
    "CandidateDirectory",
    "CandidateFetcher",
    "DirectoryError",
    "DirectoryUser",
    "HttpCandidateFetcher",
    "parse_directory_payload",
    # Editor state machine
    "EditorState",
    "MentionEditor",
    "MentionSet",
    "NavigationController",
    "classify",
    "detect",
    "filter_candidates",
    "locate",
    # Edit surface
    "DEFAULT_MENTION_KEYBINDINGS",
    "DropdownTheme",
    "KeyId",
    "MentionAction",
    "MentionInput",
    "MentionInputTheme",
    "MentionKeybindingsConfig",
    "MentionKeybindingsManager",
    "get_mention_keybindings",
    "matches_key",
    "set_mention_keybindings",
    # Session and settings
    "NoteSession",
    "SettingsManager",
    "SubmitSink",
    # Types
    "Candidate",
    "CaretContext",
    "DeleteDirection",
    "EditResult",
    "MentionRef",
    "MentionToken",
    "NotePayload",
    "TriggerContext",
]
