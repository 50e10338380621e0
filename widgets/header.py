from textual.widgets import Static
from textual.reactive import reactive
from textual.containers import Vertical
from textual.app import ComposeResult
from textual.css.query import NoMatches
from rich.text import Text
from styles import COLOR_PRIMARY, COLOR_HIGHLIGHT, COLOR_MUTED, COLOR_DIM, COLOR_INACTIVE

FEEDPLAY_LOGO = "▶ F E E D P L A Y"

PAGE_DOTS_MAX = 20


class Header(Vertical):
    DEFAULT_CSS = """
    Header {
        height: auto;
        padding: 0 1;
    }

    #header-logo {
        color: #ff8c00;
        text-style: bold;
    }
    """

    track_count: reactive[int] = reactive(0)
    current_index: reactive[int] = reactive(-1)
    is_playing: reactive[bool] = reactive(False)

    def compose(self) -> ComposeResult:
        yield Static(FEEDPLAY_LOGO, id="header-logo")
        yield Static("─" * 80, id="header-divider")
        yield Static(self._render_pager(), id="header-pager")

    def _render_pager(self) -> Text:
        result = Text()

        if self.track_count == 0:
            result.append("No tracks", style=COLOR_MUTED)
            return result

        # One dot per page, windowed around the current track
        start = max(0, min(self.current_index - PAGE_DOTS_MAX // 2, self.track_count - PAGE_DOTS_MAX))
        end = min(self.track_count, start + PAGE_DOTS_MAX)

        if start > 0:
            result.append("… ", style=COLOR_DIM)
        for i in range(start, end):
            if i == self.current_index:
                result.append("●", style=f"{COLOR_HIGHLIGHT} bold")
            else:
                result.append("○", style=COLOR_INACTIVE)
            result.append(" ")
        if end < self.track_count:
            result.append("…", style=COLOR_DIM)

        result.append("   │   ", style=COLOR_MUTED)
        if self.is_playing:
            result.append("PLAYING", style=f"{COLOR_PRIMARY} bold")
        else:
            result.append("PAUSED", style=COLOR_DIM)

        return result

    def _refresh_pager(self) -> None:
        try:
            pager = self.query_one("#header-pager", Static)
            pager.update(self._render_pager())
        except NoMatches:
            pass

    def watch_track_count(self, new_value: int) -> None:
        self._refresh_pager()

    def watch_current_index(self, new_value: int) -> None:
        self._refresh_pager()

    def watch_is_playing(self, new_value: bool) -> None:
        self._refresh_pager()
