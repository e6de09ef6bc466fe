"""Events module: presence models and wire schema definitions."""
from .schema import *

__all__ = [
    "ClientMessageType",
    "EventType",
    "PresenceEntry",
    "PresenceStatus",
    "TrainingLevel",
    "TrainingLevelName",
    "make_envelope",
]
