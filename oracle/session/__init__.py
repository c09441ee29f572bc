from .live import Console, Session
from .transcript import Transcript

__all__ = ["Console", "Session", "Transcript"]
