from .session_timer import NS_PER_MS, Clock, SessionTimer
from .timers import AsyncioTimerService

__all__ = ["AsyncioTimerService", "Clock", "NS_PER_MS", "SessionTimer"]
