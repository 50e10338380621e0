from .now_playing import NowPlayingView

__all__ = ["NowPlayingView"]
