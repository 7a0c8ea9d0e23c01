"""
Domain event module.

Provides the typed in-process event broker and the closed catalog of
event kinds shared by producers and consumers.
"""

from shopcore.events.broker import (
    DEFAULT_MAX_LISTENERS,
    DeliveryResult,
    EventBroker,
    Listener,
    ListenerFailure,
    PayloadTypeError,
    Subscription,
)
from shopcore.events.catalog import (
    EventKind,
    UnknownEventKindError,
    domains,
    kinds_for_domain,
)
from shopcore.events.payloads import PAYLOAD_TYPES, EventPayload, payload_type

__all__ = [
    "DEFAULT_MAX_LISTENERS",
    "DeliveryResult",
    "EventBroker",
    "EventKind",
    "EventPayload",
    "Listener",
    "ListenerFailure",
    "PAYLOAD_TYPES",
    "PayloadTypeError",
    "Subscription",
    "UnknownEventKindError",
    "domains",
    "kinds_for_domain",
    "payload_type",
]
