"""MentionInput - terminal note input with an "@" mention dropdown."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import grapheme

from pi.mention.editor import MentionEditor
from pi.mention.keybindings import MentionKeybindingsManager, get_mention_keybindings
from pi.mention.keys import is_printable_input
from pi.mention.locator import find_enclosing_token
from pi.mention.session import NoteSession
from pi.mention.types import NotePayload
from pi.mention.utils import grapheme_len_after, grapheme_len_before, visible_width

CURSOR_MARKER = "\x1b_pi:c\x07"

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

# Newlines are shown as a single-column glyph so caret offsets stay aligned
_NEWLINE_GLYPH = "↵"


def _dim(text: str) -> str:
    return f"\x1b[2m{text}\x1b[22m"


def _bold(text: str) -> str:
    return f"\x1b[1m{text}\x1b[22m"


@dataclass
class MentionInputTheme:
    selected_text: Callable[[str], str] = _bold
    scroll_info: Callable[[str], str] = _dim
    no_match: Callable[[str], str] = _dim


class MentionInput:
    """Single-line note input that routes raw key data through a ``NoteSession``.

    Keys that touch mention tokens (typing inside one, deleting at its edge,
    moving into it) are resolved by the editor; everything else is applied
    here as plain grapheme-wise editing and reported back through
    ``on_text_change``.
    """

    def __init__(
        self,
        session: NoteSession,
        keybindings: MentionKeybindingsManager | None = None,
        theme: MentionInputTheme | None = None,
    ) -> None:
        self._session = session
        self._keybindings = keybindings
        self._theme = theme or MentionInputTheme()

        self.on_submit: Callable[[NotePayload], None] | None = None
        self.on_escape: Callable[[], None] | None = None

        self.focused: bool = False

        # Bracketed paste mode
        self._paste_buffer: str = ""
        self._is_in_paste: bool = False

    @property
    def session(self) -> NoteSession:
        return self._session

    @property
    def editor(self) -> MentionEditor:
        return self._session.editor

    def get_value(self) -> str:
        return self.editor.buffer

    def get_cursor(self) -> int:
        return self.editor.caret

    def set_value(self, value: str) -> None:
        self.editor.on_text_change(value, len(value))

    def handle_input(self, data: str) -> None:  # noqa: C901
        # Handle bracketed paste
        if PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(PASTE_END)
            if end_index != -1:
                paste_content = self._paste_buffer[:end_index]
                self._handle_paste(paste_content)
                self._is_in_paste = False
                remaining = self._paste_buffer[end_index + len(PASTE_END):]
                self._paste_buffer = ""
                if remaining:
                    self.handle_input(remaining)
            return

        kb = self._keybindings or self._session.keybindings or get_mention_keybindings()
        editor = self.editor

        if editor.is_dropdown_open:
            if kb.matches(data, "selectCancel"):
                editor.close_dropdown()
                return
            if kb.matches(data, "selectUp"):
                editor.move_highlight(-1)
                return
            if kb.matches(data, "selectDown"):
                editor.move_highlight(1)
                return
            if kb.matches(data, "selectConfirm") and editor.visible_candidates:
                editor.select()
                return

        if kb.matches(data, "selectCancel"):
            if self.on_escape:
                self.on_escape()
            return

        if kb.matches(data, "newLine"):
            self._insert_text("\n")
            return

        if kb.matches(data, "submit"):
            payload = self._session.submit()
            if payload is not None and self.on_submit:
                self.on_submit(payload)
            return

        if kb.matches(data, "openPicker"):
            editor.open_picker()
            return

        if kb.matches(data, "deleteCharBackward"):
            self._handle_backspace()
            return

        if kb.matches(data, "deleteCharForward"):
            self._handle_forward_delete()
            return

        if kb.matches(data, "cursorLeft"):
            self._move_left()
            return

        if kb.matches(data, "cursorRight"):
            step = grapheme_len_after(editor.buffer, editor.caret)
            editor.on_caret_move(editor.caret + step)
            return

        if kb.matches(data, "cursorLineStart"):
            editor.on_caret_move(0)
            return

        if kb.matches(data, "cursorLineEnd"):
            editor.on_caret_move(len(editor.buffer))
            return

        # Regular character input
        if is_printable_input(data):
            self._insert_text(data)

    def handle_click(self, index: int) -> None:
        """Pointer click on the dropdown entry at *index*."""
        self.editor.set_highlight(index)
        self.editor.select(index)

    def _insert_text(self, text: str) -> None:
        editor = self.editor
        if editor.on_typing_key(text).handled:
            return
        buffer, caret = editor.buffer, editor.caret
        editor.on_text_change(buffer[:caret] + text + buffer[caret:], caret + len(text))

    def _handle_backspace(self) -> None:
        editor = self.editor
        if editor.on_delete_key("backward").handled:
            return
        buffer, caret = editor.buffer, editor.caret
        gl = grapheme_len_before(buffer, caret)
        if gl:
            editor.on_text_change(buffer[: caret - gl] + buffer[caret:], caret - gl)

    def _handle_forward_delete(self) -> None:
        editor = self.editor
        if editor.on_delete_key("forward").handled:
            return
        buffer, caret = editor.buffer, editor.caret
        gl = grapheme_len_after(buffer, caret)
        if gl:
            editor.on_text_change(buffer[:caret] + buffer[caret + gl:], caret)

    def _move_left(self) -> None:
        editor = self.editor
        target = editor.caret - grapheme_len_before(editor.buffer, editor.caret)
        # Stepping left into a token jumps over it instead of snapping back to its end
        token = find_enclosing_token(editor.tokens(), target)
        if token is not None:
            target = token.start
        editor.on_caret_move(target)

    def _handle_paste(self, pasted_text: str) -> None:
        clean_text = pasted_text.replace("\r\n", "\n").replace("\r", "\n")
        if clean_text:
            self._insert_text(clean_text)

    def render(self, width: int) -> list[str]:
        prompt = "> "
        available_width = width - len(prompt)

        if available_width <= 0:
            return [prompt]

        value = self.editor.buffer.replace("\n", _NEWLINE_GLYPH)
        cursor = self.editor.caret

        if visible_width(value) < available_width:
            visible_text = value
            cursor_display = cursor
        else:
            scroll_width = available_width - 1 if cursor == len(value) else available_width
            half_width = scroll_width // 2
            if cursor < half_width:
                start = 0
            elif cursor > len(value) - half_width:
                start = max(0, len(value) - scroll_width)
            else:
                start = cursor - half_width
            visible_text = value[start : start + scroll_width]
            cursor_display = cursor - start

        # Build line with cursor
        after_cursor_text = visible_text[cursor_display:]
        at_cursor = next(grapheme.graphemes(after_cursor_text), " ") if after_cursor_text else " "
        before_cursor = visible_text[:cursor_display]
        after_cursor = visible_text[cursor_display + len(at_cursor):] if after_cursor_text else ""

        marker = CURSOR_MARKER if self.focused else ""
        text_with_cursor = before_cursor + marker + f"\x1b[7m{at_cursor}\x1b[27m" + after_cursor

        visual_length = visible_width(before_cursor + at_cursor + after_cursor)
        padding = " " * max(0, available_width - visual_length)
        lines = [prompt + text_with_cursor + padding]
        lines.extend(self.editor.navigation.render(width, self._theme))
        return lines
