from typing import Iterable, Iterator, Optional, Tuple

from .track import Track


class InvalidNavigationError(Exception):
    """Raised when an index falls outside the catalog."""
    pass


class Catalog:
    """Ordered, immutable sequence of tracks fetched from the feed.

    Per-track changes never mutate a Catalog in place; ``replace`` returns a
    new Catalog with the substituted record.
    """

    __slots__ = ("_tracks",)

    def __init__(self, tracks: Iterable[Track] = ()):
        self._tracks: Tuple[Track, ...] = tuple(tracks)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    def __getitem__(self, index: int) -> Track:
        return self._tracks[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._tracks == other._tracks

    def __hash__(self) -> int:
        return hash(self._tracks)

    def __repr__(self) -> str:
        return f"Catalog({len(self._tracks)} tracks)"

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self._tracks

    def contains_index(self, index: int) -> bool:
        return 0 <= index < len(self._tracks)

    def track_at(self, index: int) -> Track:
        """Return the track at ``index``.

        Unlike ``catalog[index]`` this never accepts negative indices.

        Raises:
            InvalidNavigationError: If index is outside [0, len).
        """
        if not self.contains_index(index):
            raise InvalidNavigationError(
                f"Index {index} out of range for catalog of {len(self._tracks)} tracks"
            )
        return self._tracks[index]

    def index_of(self, track_id: str) -> Optional[int]:
        """Return the index of the track with ``track_id``, or None."""
        for i, track in enumerate(self._tracks):
            if track.id == track_id:
                return i
        return None

    def replace(self, index: int, track: Track) -> "Catalog":
        """Return a new Catalog with the record at ``index`` substituted."""
        self.track_at(index)
        tracks = list(self._tracks)
        tracks[index] = track
        return Catalog(tracks)
