from apiary.core.event.bus import EventBus
from apiary.core.event.types import EventListener, EventPayload, ListenerPriority

__all__ = ["EventBus", "EventListener", "EventPayload", "ListenerPriority"]
