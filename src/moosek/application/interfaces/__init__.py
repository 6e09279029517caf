"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from moosek.application.interfaces.audio_engine import AudioEngine, LoadResult, Player
from moosek.application.interfaces.notifier import NotificationPayload, NotificationSink, PayloadField

__all__ = [
    "AudioEngine",
    "Player",
    "LoadResult",
    "NotificationSink",
    "NotificationPayload",
    "PayloadField",
]
