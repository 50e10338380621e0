from dataclasses import dataclass, replace
from typing import Any, Dict
from urllib.parse import urlparse

PLAYABLE_SCHEMES = {"http", "https", "file"}


def format_time(seconds: float) -> str:
    """Format seconds as M:SS."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class Track:
    """Represents a track in the feed."""
    id: str
    title: str
    handle: str
    display_name: str
    image_url: str = ""
    audio_url: str = ""  # Empty when the track has no playable audio
    is_liked: bool = False
    upvote_count: int = 0

    def __post_init__(self):
        if self.upvote_count < 0:
            object.__setattr__(self, "upvote_count", 0)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Track":
        """Create a Track from one element of the feed's ``songs`` list.

        The feed uses snake_case keys; camelCase keys are accepted as well.
        Every field is required.

        Args:
            payload: Decoded JSON object for a single song.

        Returns:
            Track populated from the payload.

        Raises:
            ValueError: If the payload is not an object or a field is missing.
            TypeError: If a field has the wrong type.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Song entry must be an object, got {type(payload).__name__}")

        def pick(snake: str, camel: str, kind: type) -> Any:
            if snake in payload:
                value = payload[snake]
            elif camel in payload:
                value = payload[camel]
            else:
                raise ValueError(f"Song entry is missing '{snake}'")
            # bool is a subclass of int
            if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
                raise TypeError(f"Song field '{snake}' must be {kind.__name__}, got {type(value).__name__}")
            return value

        track_id = payload.get("id")
        if not track_id:
            raise ValueError("Song entry is missing an id")
        if not isinstance(track_id, str):
            raise TypeError(f"Song id must be a string, got {type(track_id).__name__}")

        return cls(
            id=track_id,
            title=pick("title", "title", str),
            handle=pick("handle", "handle", str),
            display_name=pick("display_name", "displayName", str),
            image_url=pick("image_url", "imageUrl", str),
            audio_url=pick("audio_url", "audioUrl", str),
            is_liked=pick("is_liked", "isLiked", bool),
            upvote_count=pick("upvote_count", "upvoteCount", int),
        )

    @property
    def has_audio(self) -> bool:
        """Whether the audio URL points at something the engine can fetch."""
        if not self.audio_url.strip():
            return False
        parsed = urlparse(self.audio_url)
        if parsed.scheme not in PLAYABLE_SCHEMES:
            return False
        if parsed.scheme == "file":
            return bool(parsed.path)
        return bool(parsed.netloc)

    def with_like_toggled(self) -> "Track":
        """Return a copy with the like flipped and the upvote count adjusted."""
        liked = not self.is_liked
        if liked:
            count = self.upvote_count + 1
        else:
            count = max(0, self.upvote_count - 1)
        return replace(self, is_liked=liked, upvote_count=count)
