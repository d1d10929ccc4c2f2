"""Rich rendering of the word player.

Draws one word per frame with its pivot letter highlighted and placed
on the centre column, vertically centred, with a grey status line at the
bottom. The renderer only reads PlaybackSnapshot objects; it never
touches the controller or stream.
"""

from __future__ import annotations

from rich.cells import cell_len
from rich.console import Console, ConsoleOptions, RenderResult
from rich.live import Live
from rich.style import Style
from rich.text import Text

from zippy.schemas.player import PlaybackSnapshot

STATUS_GRAY = "#777777"
PIVOT_RED = "#FF3B30"

_PIVOT_STYLE = Style(color=PIVOT_RED, bold=True)
_STATUS_STYLE = Style(color=STATUS_GRAY)
_ERROR_STYLE = Style(color="red", bold=True)


def pivot_index(length: int) -> int:
    """Index of the highlighted letter for a word of ``length`` characters."""
    if length <= 1:
        return 0
    if length <= 5:
        return 1
    if length <= 9:
        return 2
    if length <= 13:
        return 3
    return 4


def format_word(word: str, width: int) -> Text:
    """Lay out a word so its pivot letter lands on the centre column."""
    if width <= 0:
        return Text(word)
    if not word:
        return Text()

    pivot = min(pivot_index(len(word)), len(word) - 1)
    left, pivot_char, right = word[:pivot], word[pivot], word[pivot + 1:]
    left_pad = max(width // 2 - cell_len(left), 0)

    text = Text(" " * left_pad + left)
    text.append(pivot_char, style=_PIVOT_STYLE)
    text.append(right)
    return text


def control_hints(snapshot: PlaybackSnapshot) -> str:
    """Key help for the controls the active stream supports."""
    controls = "space: play/pause  +/-: speed"
    if snapshot.seekable:
        controls += "  h/l: back/forward"
    if snapshot.restartable:
        controls += "  r: restart"
    return controls + "  q: quit"


def status_line(snapshot: PlaybackSnapshot, width: int) -> Text:
    total = str(snapshot.total) if snapshot.total_known else "?"
    text = Text(f"WPM {snapshot.wpm}  {snapshot.position + 1}/{total}", style=_STATUS_STYLE)
    if not snapshot.playing:
        text.append("  paused", style=_STATUS_STYLE)
    if snapshot.error:
        text.append(f"  error: {snapshot.error}", style=_ERROR_STYLE)
    text.append(f"  {control_hints(snapshot)}", style=_STATUS_STYLE)
    text.truncate(max(width, 0), overflow="crop")
    return text


def render_frame(snapshot: PlaybackSnapshot, width: int, height: int) -> Text:
    """Build the full-screen frame for one snapshot."""
    if snapshot.word is None:
        if snapshot.error:
            return Text(f"Error: {snapshot.error}", style=_ERROR_STYLE)
        if snapshot.finished:
            return Text("No words to display.")
        return Text("Loading...")
    if width <= 0 or height <= 0:
        return Text("Loading...")

    content_height = height - 1 if height > 1 else height
    top = (content_height - 1) // 2
    bottom = content_height - 1 - top

    frame = Text(no_wrap=True, overflow="crop")
    frame.append("\n" * top)
    frame.append_text(format_word(snapshot.word, width))
    frame.append("\n" * bottom)
    if content_height < height:
        frame.append("\n")
        frame.append_text(status_line(snapshot, width))
    return frame


class WordFrame:
    """Renderable that lays out a snapshot for whatever size it is given."""

    def __init__(self, snapshot: PlaybackSnapshot) -> None:
        self.snapshot = snapshot

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        height = options.height or console.size.height
        yield render_frame(self.snapshot, options.max_width, height)


class PlayerDisplay:
    """Full-screen Rich Live display for the player."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self._live: Live | None = None

    def start(self, snapshot: PlaybackSnapshot) -> None:
        self._live = Live(
            WordFrame(snapshot),
            console=self._console,
            screen=True,
            refresh_per_second=8,
            transient=True,
        )
        self._live.start()

    def refresh(self, snapshot: PlaybackSnapshot) -> None:
        if self._live is not None:
            self._live.update(WordFrame(snapshot), refresh=True)

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
