from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Static
from rich.text import Text
from models import PlaybackState, Track, TimeSource, format_time
from services.playback_machine import PlaybackStateMachine
from styles import COLOR_BASS, COLOR_PRIMARY, COLOR_HIGHLIGHT, COLOR_MUTED, COLOR_INACTIVE

PROGRESS_BAR_WIDTH = 50


def render_progress_bar(progress: float, width: int = PROGRESS_BAR_WIDTH) -> Text:
    """Render the progress fraction as a horizontal bar."""
    progress = max(0.0, min(1.0, progress))
    filled = int(progress * width)

    result = Text()
    result.append("│", style=COLOR_MUTED)
    for i in range(width):
        if i < filled:
            if i < width * 0.7:
                result.append("█", style=COLOR_BASS)
            elif i < width * 0.85:
                result.append("█", style=COLOR_PRIMARY)
            else:
                result.append("█", style=COLOR_HIGHLIGHT)
        else:
            result.append("─", style=COLOR_INACTIVE)
    result.append("│", style=COLOR_MUTED)
    return result


def render_likes(track: Track) -> Text:
    result = Text()
    if track.is_liked:
        result.append("♥ ", style=f"{COLOR_HIGHLIGHT} bold")
    else:
        result.append("♡ ", style=COLOR_MUTED)
    result.append(str(track.upvote_count), style=COLOR_PRIMARY)
    return result


class NowPlayingView(Container):
    """Widget displaying the current track of the feed and its progress."""

    DEFAULT_CSS = """
    NowPlayingView {
        background: #1a1a1a;
        border: solid #ff8c00;
        padding: 1 2;
        height: 1fr;
    }

    NowPlayingView .track-title {
        color: #ff8c00;
        text-style: bold;
    }

    NowPlayingView .track-metadata {
        color: #888888;
    }
    """

    def __init__(self, machine: PlaybackStateMachine, **kwargs):
        """Initialize NowPlayingView with the playback state machine."""
        super().__init__(**kwargs)
        self.machine = machine
        self._subscriptions = []

    def compose(self) -> ComposeResult:
        """Compose the view with track info and progress."""
        with Vertical():
            yield Static("♪", classes="music-icon")
            yield Static("Loading feed…", id="np-title", classes="track-title")
            yield Static("", id="np-artist", classes="track-metadata")
            yield Static("", id="np-likes", classes="track-metadata")
            yield Static(render_progress_bar(0.0), id="np-progress")
            yield Static("0:00 / 0:00", id="np-time", classes="time-display")
            yield Static("State: Stopped", id="np-state", classes="state-display")
            yield Static("", id="np-position", classes="track-metadata")

    def on_mount(self) -> None:
        """Subscribe to the state machine and paint the initial state."""
        self._subscriptions = [
            self.machine.state_changed.subscribe(lambda state: self.update_view()),
            self.machine.catalog_changed.subscribe(lambda catalog: self.update_view()),
        ]
        self.update_view()

    def on_unmount(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    def update_view(self) -> None:
        """Repaint every widget from the machine's current state."""
        state = self.machine.state
        track = self.machine.current_track

        title = self.query_one("#np-title", Static)
        artist = self.query_one("#np-artist", Static)
        likes = self.query_one("#np-likes", Static)
        position = self.query_one("#np-position", Static)

        if track:
            title.update(track.title)
            artist.update(f"{track.display_name} (@{track.handle})")
            likes.update(render_likes(track))
            position.update(f"Track {state.current_index + 1} / {len(self.machine.catalog)}")
        else:
            title.update("No track playing")
            artist.update("")
            likes.update("")
            position.update("")

        self.query_one("#np-progress", Static).update(render_progress_bar(state.progress))
        self.query_one("#np-time", Static).update(
            f"{format_time(state.elapsed)} / {format_time(state.duration)}"
        )
        self.query_one("#np-state", Static).update(f"State: {self._describe(state)}")

    @staticmethod
    def _describe(state: PlaybackState) -> str:
        if not state.has_track:
            return "Stopped"
        label = "Playing" if state.is_playing else "Paused"
        if state.time_source is TimeSource.CLOCK:
            label += " (no audio)"
        return label
