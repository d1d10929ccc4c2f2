"""Tests for zippy.display — word layout and frame rendering."""

from __future__ import annotations

from rich.console import Console

from zippy.display import (
    PIVOT_RED,
    PlayerDisplay,
    WordFrame,
    control_hints,
    format_word,
    pivot_index,
    render_frame,
    status_line,
)
from zippy.schemas.player import PlaybackSnapshot


def _snap(**overrides) -> PlaybackSnapshot:
    defaults = {
        "word": "reading",
        "position": 4,
        "total_known": True,
        "total": 10,
        "wpm": 500,
        "playing": True,
        "seekable": True,
        "restartable": True,
    }
    defaults.update(overrides)
    return PlaybackSnapshot(**defaults)


class TestPivotIndex:
    def test_thresholds(self):
        assert pivot_index(0) == 0
        assert pivot_index(1) == 0
        assert pivot_index(2) == 1
        assert pivot_index(5) == 1
        assert pivot_index(6) == 2
        assert pivot_index(9) == 2
        assert pivot_index(10) == 3
        assert pivot_index(13) == 3
        assert pivot_index(14) == 4
        assert pivot_index(40) == 4


class TestFormatWord:
    def test_pivot_on_centre_column(self):
        text = format_word("reading", 40)
        # pivot index 2 -> "a" at column 20
        assert text.plain.index("a") == 20
        assert text.plain.strip() == "reading"

    def test_pivot_styled(self):
        text = format_word("hello", 20)
        pivot_col = text.plain.index("e")
        styled = [span for span in text.spans if span.start == pivot_col]
        assert styled
        assert styled[0].style.color.name.lower() == PIVOT_RED.lower()
        assert styled[0].style.bold is True

    def test_single_letter(self):
        text = format_word("a", 10)
        assert text.plain == " " * 5 + "a"

    def test_long_left_part_no_negative_padding(self):
        text = format_word("extraordinarily", 4)
        assert text.plain == "extraordinarily"

    def test_zero_width(self):
        assert format_word("word", 0).plain == "word"

    def test_empty_word(self):
        assert format_word("", 10).plain == ""


class TestStatusLine:
    def test_contents(self):
        line = status_line(_snap(), 200).plain
        assert line.startswith("WPM 500  5/10")
        assert "h/l: back/forward" in line
        assert "r: restart" in line
        assert "q: quit" in line

    def test_unknown_total(self):
        line = status_line(_snap(total_known=False, total=0), 200).plain
        assert "5/?" in line

    def test_paused_marker(self):
        assert "paused" in status_line(_snap(playing=False), 200).plain
        assert "paused" not in status_line(_snap(playing=True), 200).plain

    def test_error_marker(self):
        line = status_line(_snap(error="reading input failed: boom"), 200).plain
        assert "error: reading input failed: boom" in line

    def test_truncated_to_width(self):
        assert len(status_line(_snap(), 12).plain) <= 12

    def test_hints_follow_capabilities(self):
        hints = control_hints(_snap(seekable=False, restartable=False))
        assert "back/forward" not in hints
        assert "restart" not in hints
        assert hints == "space: play/pause  +/-: speed  q: quit"


class TestRenderFrame:
    def test_loading_before_first_word(self):
        assert render_frame(_snap(word=None), 80, 24).plain == "Loading..."

    def test_loading_without_size(self):
        assert render_frame(_snap(), 0, 0).plain == "Loading..."

    def test_no_words(self):
        assert render_frame(_snap(word=None, finished=True), 80, 24).plain == "No words to display."

    def test_error_without_word(self):
        frame = render_frame(_snap(word=None, finished=True, error="boom"), 80, 24)
        assert frame.plain == "Error: boom"

    def test_error_keeps_word_visible(self):
        frame = render_frame(_snap(error="boom"), 80, 24).plain
        assert "reading" in frame
        assert "error: boom" in frame

    def test_layout_fills_height(self):
        lines = render_frame(_snap(), 80, 24).plain.split("\n")
        assert len(lines) == 24
        assert lines[11].strip() == "reading"
        assert lines[-1].startswith("WPM 500")

    def test_single_row_has_no_status(self):
        frame = render_frame(_snap(), 80, 1).plain
        assert frame.strip() == "reading"
        assert "WPM" not in frame


class TestWordFrame:
    def test_renders_with_console_size(self):
        console = Console(width=60, height=10, record=True, color_system=None)
        console.print(WordFrame(_snap()))
        output = console.export_text()
        assert "reading" in output
        assert "WPM 500" in output


class TestPlayerDisplay:
    def test_refresh_before_start_is_noop(self):
        display = PlayerDisplay(Console(width=40, height=5, color_system=None))
        display.refresh(_snap())
        display.stop()
