import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from .playback import DEFAULT_DURATION

DEFAULT_ENDPOINT = "https://apitest.suno.com/api/songs"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class FeedSettings:
    """Runtime configuration for the feed player.

    Attributes:
        endpoint: URL of the song feed
        request_timeout: Seconds before an HTTP request gives up
        tick_interval: Seconds between fallback clock ticks
        poll_interval: Seconds between media engine position reports
        fallback_duration: Track length assumed until the engine knows better
        log_level: Logging level name
        log_dir: Directory holding the log file
    """
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout: float = 30.0
    tick_interval: float = 1.0
    poll_interval: float = 0.5
    fallback_duration: float = DEFAULT_DURATION
    log_level: str = "INFO"
    log_dir: Path = field(default_factory=lambda: Path.home() / '.local' / 'share' / 'feedplay')

    def __post_init__(self):
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir).expanduser()

        if urlparse(self.endpoint).scheme not in ("http", "https"):
            raise ValueError(f"endpoint must be an http(s) URL, got {self.endpoint!r}")

        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")

        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be > 0")

        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        if self.fallback_duration <= 0:
            raise ValueError("fallback_duration must be > 0")

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")

    @property
    def log_file(self) -> Path:
        return self.log_dir / 'feedplay.log'

    @classmethod
    def from_env(cls) -> "FeedSettings":
        """Build settings from FEEDPLAY_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        kwargs = {}
        env = os.environ

        if env.get('FEEDPLAY_ENDPOINT'):
            kwargs['endpoint'] = env['FEEDPLAY_ENDPOINT']
        if env.get('FEEDPLAY_TIMEOUT'):
            kwargs['request_timeout'] = float(env['FEEDPLAY_TIMEOUT'])
        if env.get('FEEDPLAY_TICK_INTERVAL'):
            kwargs['tick_interval'] = float(env['FEEDPLAY_TICK_INTERVAL'])
        if env.get('FEEDPLAY_POLL_INTERVAL'):
            kwargs['poll_interval'] = float(env['FEEDPLAY_POLL_INTERVAL'])
        if env.get('FEEDPLAY_FALLBACK_DURATION'):
            kwargs['fallback_duration'] = float(env['FEEDPLAY_FALLBACK_DURATION'])
        if env.get('FEEDPLAY_LOG_LEVEL'):
            kwargs['log_level'] = env['FEEDPLAY_LOG_LEVEL']
        if env.get('FEEDPLAY_LOG_DIR'):
            kwargs['log_dir'] = env['FEEDPLAY_LOG_DIR']

        return cls(**kwargs)
