from __future__ import annotations

from textual.screen import ModalScreen
from textual.widgets import Static, Button
from textual.containers import Container, VerticalScroll
from textual.app import ComposeResult

HELP_TEXT = """[bold #ff8c00]▶ FEEDPLAY - Terminal Music Feed[/bold #ff8c00]

[bold]NAVIGATION[/bold]
  n / →       Next track
  p / ←       Previous track

[bold]PLAYBACK CONTROLS[/bold]
  Space       Play/Pause current track

[bold]FEED[/bold]
  l           Like / unlike current track
  r           Reload the feed
  h/?         Show this help
  q           Quit application

[bold]NOTES[/bold]
  • The feed is fetched once at startup
  • Tracks without audio advance on a timer
  • Playback moves to the next track when one ends"""


class HelpScreen(ModalScreen[None]):
    """Modal screen displaying key bindings."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-container {
        width: 70;
        height: 80%;
        background: #1a1a1a;
        border: thick #cc5500;
        padding: 1 2;
    }

    #help-scroll {
        width: 100%;
        height: 1fr;
        margin-bottom: 1;
    }

    #help-content {
        width: 100%;
        height: auto;
    }

    #help-close-button {
        width: 100%;
        height: auto;
        background: #2d2d2d;
        color: #ff8c00;
        border: solid #ff8c00;
        text-style: bold;
    }

    #help-close-button:focus {
        border: solid #ffb347;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the help screen."""
        with Container(id="help-container"):
            with VerticalScroll(id="help-scroll"):
                yield Static(HELP_TEXT, id="help-content")

            yield Button("Close (Esc)", id="help-close-button", variant="primary")

    def on_mount(self) -> None:
        """Focus the button when screen mounts."""
        self.call_after_refresh(self._focus_button)

    def _focus_button(self) -> None:
        self.query_one("#help-close-button", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle close button press."""
        if event.button.id == "help-close-button":
            self.dismiss()

    async def on_key(self, event) -> None:
        """Close on escape."""
        if event.key == "escape":
            self.dismiss()
            event.prevent_default()
            event.stop()
