from .resolver import resolve_value
from .scheduler import PlaybackScheduler, PlaybackSession

__all__ = ["PlaybackScheduler", "PlaybackSession", "resolve_value"]
