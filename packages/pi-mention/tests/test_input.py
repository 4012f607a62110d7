"""Tests for the MentionInput edit surface."""

from __future__ import annotations

from pi.mention.input import CURSOR_MARKER, MentionInput
from pi.mention.session import NoteSession
from pi.mention.settings import SettingsManager
from pi.mention.types import NotePayload
from pi.mention.utils import visible_width

# Raw escape codes for key sequences
KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_LEFT = "\x1b[D"
KEY_RIGHT = "\x1b[C"
KEY_HOME = "\x1b[H"
KEY_END = "\x1b[F"
KEY_ENTER = "\r"
KEY_SHIFT_ENTER = "\x1b[13;2u"
KEY_TAB = "\t"
KEY_ESCAPE = "\x1b"
KEY_BACKSPACE = "\x7f"
KEY_DELETE = "\x1b[3~"
KEY_CTRL_K = "\x0b"
KEY_CTRL_O = "\x0f"


def _make_input() -> tuple[MentionInput, list[NotePayload]]:
    submitted: list[NotePayload] = []
    inp = MentionInput(NoteSession())
    inp.on_submit = submitted.append
    return inp, submitted


def _type(inp: MentionInput, text: str) -> None:
    for ch in text:
        inp.handle_input(ch)


class TestEnterRouting:
    """Enter inserts from an open dropdown, otherwise submits."""

    def test_end_to_end(self) -> None:
        inp, submitted = _make_input()
        _type(inp, "Ping @car")
        assert inp.editor.is_dropdown_open

        inp.handle_input(KEY_ENTER)
        assert inp.get_value() == "Ping @Carole Mutemi "
        assert inp.get_cursor() == 20
        assert submitted == []

        inp.handle_input(KEY_ENTER)
        assert len(submitted) == 1
        assert submitted[0].text == "Ping @Carole Mutemi"
        assert [m.id for m in submitted[0].mentions] == ["2"]
        assert inp.get_value() == ""

    def test_arrow_keys_move_highlight(self) -> None:
        inp, _ = _make_input()
        _type(inp, "@car")
        inp.handle_input(KEY_DOWN)
        inp.handle_input(KEY_DOWN)
        inp.handle_input(KEY_UP)
        inp.handle_input(KEY_TAB)
        assert inp.get_value() == "@Carole Wanjiku "

    def test_enter_with_empty_dropdown_submits(self) -> None:
        inp, submitted = _make_input()
        _type(inp, "@zz")
        inp.handle_input(KEY_ENTER)
        assert [p.text for p in submitted] == ["@zz"]

    def test_enter_on_blank_buffer_does_nothing(self) -> None:
        inp, submitted = _make_input()
        _type(inp, "   ")
        inp.handle_input(KEY_ENTER)
        assert submitted == []
        assert inp.get_value() == "   "

    def test_shift_enter_inserts_newline(self) -> None:
        inp, submitted = _make_input()
        _type(inp, "a")
        inp.handle_input(KEY_SHIFT_ENTER)
        _type(inp, "b")
        assert inp.get_value() == "a\nb"
        assert submitted == []


class TestEscape:
    def test_escape_closes_dropdown_first(self) -> None:
        escaped: list[bool] = []
        inp, _ = _make_input()
        inp.on_escape = lambda: escaped.append(True)

        _type(inp, "@car")
        inp.handle_input(KEY_ESCAPE)
        assert not inp.editor.is_dropdown_open
        assert inp.get_value() == "@car"
        assert escaped == []

        inp.handle_input(KEY_ESCAPE)
        assert escaped == [True]


class TestPicker:
    def test_open_picker_key_from_settings(self) -> None:
        settings = SettingsManager.in_memory({"keybindings": {"openPicker": "ctrl+k"}})
        inp = MentionInput(NoteSession.from_settings(settings))
        inp.handle_input(KEY_CTRL_O)
        assert not inp.editor.is_picker_open
        inp.handle_input(KEY_CTRL_K)
        assert inp.editor.is_picker_open

    def test_ctrl_o_then_click(self) -> None:
        inp, _ = _make_input()
        _type(inp, "Hi ")
        inp.handle_input(KEY_CTRL_O)
        assert inp.editor.is_picker_open
        inp.handle_click(3)
        assert inp.get_value() == "Hi @Carole Kim "


class TestTokenEditing:
    def _with_mention(self) -> MentionInput:
        inp, _ = _make_input()
        _type(inp, "Ping @car")
        inp.handle_input(KEY_ENTER)
        _type(inp, "now")
        return inp

    def test_backspace_after_inserted_mention_removes_it(self) -> None:
        inp, _ = _make_input()
        _type(inp, "Ping @car")
        inp.handle_input(KEY_ENTER)
        inp.handle_input(KEY_BACKSPACE)
        assert inp.get_value() == "Ping "
        assert inp.get_cursor() == 5
        assert len(inp.editor.mentions) == 0

    def test_backspace_at_token_end_removes_token(self) -> None:
        inp, _ = _make_input()
        _type(inp, "@car")
        inp.handle_input(KEY_ENTER)
        inp.handle_input(KEY_LEFT)
        assert inp.get_cursor() == 14
        inp.handle_input(KEY_BACKSPACE)
        assert inp.get_value() == " "
        assert inp.get_cursor() == 0
        assert len(inp.editor.mentions) == 0

    def test_left_arrow_jumps_over_token(self) -> None:
        inp = self._with_mention()
        inp.handle_input(KEY_HOME)
        for _ in range(6):
            inp.handle_input(KEY_RIGHT)
        # Stepping right from "Ping |@" lands inside the token and snaps to its end
        assert inp.get_cursor() == 19

        inp.handle_input(KEY_LEFT)
        assert inp.get_cursor() == 5

    def test_delete_at_token_start(self) -> None:
        inp = self._with_mention()
        inp.handle_input(KEY_HOME)
        for _ in range(5):
            inp.handle_input(KEY_RIGHT)
        inp.handle_input(KEY_DELETE)
        assert inp.get_value() == "Ping now"

    def test_end_key(self) -> None:
        inp = self._with_mention()
        inp.handle_input(KEY_HOME)
        inp.handle_input(KEY_END)
        assert inp.get_cursor() == len(inp.get_value())

    def test_plain_forward_delete(self) -> None:
        inp, _ = _make_input()
        _type(inp, "abc")
        inp.handle_input(KEY_HOME)
        inp.handle_input(KEY_DELETE)
        assert inp.get_value() == "bc"
        assert inp.get_cursor() == 0


class TestPaste:
    def test_bracketed_paste(self) -> None:
        inp, _ = _make_input()
        inp.handle_input("\x1b[200~hello\r\nworld\x1b[201~")
        assert inp.get_value() == "hello\nworld"

    def test_paste_split_across_chunks(self) -> None:
        inp, _ = _make_input()
        inp.handle_input("\x1b[200~hi @ca")
        assert inp.get_value() == ""
        inp.handle_input("r\x1b[201~")
        assert inp.get_value() == "hi @car"
        assert inp.editor.is_dropdown_open


class TestRender:
    def test_prompt_and_cursor(self) -> None:
        inp, _ = _make_input()
        lines = inp.render(40)
        assert len(lines) == 1
        assert lines[0].startswith("> ")
        assert "\x1b[7m" in lines[0]

    def test_each_render_reflects_the_latest_edit(self) -> None:
        inp, _ = _make_input()
        _type(inp, "hi")
        assert "hi" in inp.render(40)[0]
        _type(inp, " there")
        assert "hi there" in inp.render(40)[0]
        assert not hasattr(inp, "invalidate")

    def test_line_is_padded_to_width(self) -> None:
        inp, _ = _make_input()
        _type(inp, "hello")
        inp.focused = True
        line = inp.render(30)[0]
        assert CURSOR_MARKER in line
        assert visible_width(line.replace(CURSOR_MARKER, "")) == 30

    def test_dropdown_rows_follow_the_input_line(self) -> None:
        inp, _ = _make_input()
        _type(inp, "@car")
        lines = inp.render(40)
        assert len(lines) == 5
        assert "Carole Mutemi" in lines[1]
        assert "→" in lines[1]

    def test_no_match_row(self) -> None:
        inp, _ = _make_input()
        _type(inp, "@zz")
        lines = inp.render(40)
        assert "No users found" in lines[1]

    def test_long_value_scrolls(self) -> None:
        inp, _ = _make_input()
        _type(inp, "x" * 100)
        line = inp.render(20)[0]
        assert visible_width(line) == 20
