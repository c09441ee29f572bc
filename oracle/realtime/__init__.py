"""Realtime propagation: message subscriptions, presence and change feeds."""

from .feed import MessageFilter, Subscription, subscribe
from .poller import StorePoller
from .presence import DEFAULT_TOPIC, PresenceHandle, track_presence
from .transport import ChangeEvent, LocalTransport, PresenceEvent

__all__ = [
    "DEFAULT_TOPIC",
    "ChangeEvent",
    "LocalTransport",
    "MessageFilter",
    "PresenceEvent",
    "PresenceHandle",
    "StorePoller",
    "Subscription",
    "subscribe",
    "track_presence",
]
