from textual.app import App, ComposeResult
from textual.widgets import Footer
from textual.binding import Binding
import logging
import sys

from models import FeedSettings
from widgets import Header, HelpScreen
from views import NowPlayingView
from services.catalog_client import CatalogClient
from services.media_engine import MediaEngine, NullMediaEngine, PygameMediaEngine
from services.navigation import NavigationBridge
from services.playback_clock import PlaybackClock
from services.playback_machine import PlaybackStateMachine

logger = logging.getLogger(__name__)


def configure_logging(settings: FeedSettings) -> None:
    """Send log records to the log file; the terminal belongs to the UI."""
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.log_file)
        ]
    )


class FeedplayApp(App):
    """A paginated terminal music feed built with Textual."""

    TITLE = "FEEDPLAY"

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("space", "play_pause", "Play/Pause"),
        Binding("n", "next_track", "Next", priority=True),
        Binding("right", "next_track", "Next", show=False, priority=True),
        Binding("p", "previous_track", "Prev", priority=True),
        Binding("left", "previous_track", "Prev", show=False, priority=True),
        Binding("l", "toggle_like", "Like", priority=True),
        Binding("r", "reload", "Reload", priority=True),
        Binding("h", "show_help", "Help", priority=True),
        Binding("?", "show_help", "Help", show=False, priority=True),
    ]

    def __init__(
        self,
        settings: FeedSettings | None = None,
        catalog_client: CatalogClient | None = None,
        media_engine: MediaEngine | None = None,
        *args,
        **kwargs
    ):
        super().__init__(*args, **kwargs)

        logger.info("Starting FEEDPLAY application")

        self.settings = settings or FeedSettings()
        self.media_engine = media_engine or self._create_media_engine()
        self.catalog_client = catalog_client or CatalogClient(
            self.settings.endpoint, timeout=self.settings.request_timeout
        )
        self.machine = PlaybackStateMachine(
            self.catalog_client,
            self.media_engine,
            clock=PlaybackClock(self.set_interval, "playback-clock"),
            tick_interval=self.settings.tick_interval,
            fallback_duration=self.settings.fallback_duration,
        )
        self.navigation = NavigationBridge(self.machine)
        self._released = False
        logger.info("Services initialized successfully")

    def _create_media_engine(self) -> MediaEngine:
        try:
            return PygameMediaEngine(
                self.set_interval,
                poll_interval=self.settings.poll_interval,
                timeout=self.settings.request_timeout,
            )
        except RuntimeError as e:
            logger.warning(f"{e}; tracks will advance on a timer")
            return NullMediaEngine()

    def compose(self) -> ComposeResult:
        """Compose the main application layout."""
        yield Header()
        yield NowPlayingView(self.machine, id="now_playing")
        yield Footer()

    def on_mount(self) -> None:
        """Subscribe the header and fetch the feed."""
        self.machine.state_changed.subscribe(lambda state: self._sync_header())
        self.machine.catalog_changed.subscribe(lambda catalog: self._sync_header())
        self.run_worker(self._load_catalog, exclusive=True)

    def on_unmount(self) -> None:
        self.release_services()

    def release_services(self) -> None:
        """Release timers, subscriptions and audio output. Safe to call twice."""
        if self._released:
            return
        self._released = True
        self.navigation.close()
        self.machine.close()
        self.media_engine.shutdown()

    async def _load_catalog(self) -> None:
        """Fetch the feed and start playback.

        Displays a notification if the feed cannot be loaded.
        """
        logger.info(f"Fetching feed from {self.settings.endpoint}")
        loaded = await self.machine.load()

        if not loaded:
            self.notify(
                "❌ Could not load the feed\n\nPress r to try again.",
                severity="error",
                timeout=8
            )
        elif len(self.machine.catalog) == 0:
            self.notify("The feed is empty", severity="warning", timeout=5)
        else:
            self.notify(
                f"✓ Loaded {len(self.machine.catalog)} tracks",
                severity="information",
                timeout=3
            )

    def _sync_header(self) -> None:
        header = self.query_one(Header)
        state = self.machine.state
        header.track_count = len(self.machine.catalog)
        header.current_index = state.current_index if state.current_index is not None else -1
        header.is_playing = state.is_playing

    def action_play_pause(self) -> None:
        """Toggle play/pause state."""
        self.machine.toggle_play_pause()

    def action_next_track(self) -> None:
        """Page to the next track."""
        self.navigation.swipe_next()

    def action_previous_track(self) -> None:
        """Page to the previous track."""
        self.navigation.swipe_previous()

    def action_toggle_like(self) -> None:
        """Like or unlike the current track."""
        track = self.machine.current_track
        if track is None:
            return
        updated = self.machine.toggle_like(track.id)
        if updated and updated.is_liked:
            self.notify(f"♥ Liked {updated.title}", timeout=1.5)

    def action_reload(self) -> None:
        """Fetch the feed again."""
        self.run_worker(self._load_catalog, exclusive=True)

    def action_show_help(self) -> None:
        """Show help screen."""
        self.push_screen(HelpScreen())


def main():
    """Entry point for the FEEDPLAY application.

    Handles initialization errors and provides user-friendly error messages.
    """
    try:
        settings = FeedSettings.from_env()
    except ValueError as e:
        print(f"\n❌ Invalid configuration: {e}\n")
        sys.exit(1)

    configure_logging(settings)
    app = None

    try:
        logger.info("=" * 60)
        logger.info("FEEDPLAY starting up")
        logger.info("=" * 60)

        app = FeedplayApp(settings)
        app.run()

        logger.info("FEEDPLAY shut down cleanly")

    except KeyboardInterrupt:
        logger.info("FEEDPLAY interrupted by user")
        print("\n\nGoodbye! 👋\n")
    except Exception as e:
        logger.critical(f"Unexpected fatal error: {type(e).__name__}: {e}", exc_info=True)
        print("\n❌ FEEDPLAY encountered an unexpected error\n")
        print(f"{type(e).__name__}: {e}\n")
        print(f"Check {settings.log_file} for more details.\n")
        sys.exit(1)
    finally:
        if app is not None:
            app.release_services()


if __name__ == "__main__":
    main()
