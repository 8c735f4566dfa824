"""Typed change events and a synchronous event bus.

Caches and views never talk to the file watcher or the configuration store
directly. They subscribe to the event types they care about and the bus
delivers each published event to every subscriber, in subscription order.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """File-system change kinds reported by the watcher."""

    CREATED = "created"
    CHANGED = "changed"
    DELETED = "deleted"


@dataclass(frozen=True)
class Event:
    """Base class for all bus events."""


@dataclass(frozen=True)
class FileChanged(Event):
    """A watched manifest was created, changed or deleted on disk."""

    path: Path
    change: ChangeType


@dataclass(frozen=True)
class DocumentChanged(Event):
    """An open document's text changed (unsaved edits)."""

    path: Path


@dataclass(frozen=True)
class WorkspaceFoldersChanged(Event):
    """Workspace folders were added or removed."""

    added: tuple[Path, ...] = ()
    removed: tuple[Path, ...] = ()


@dataclass(frozen=True)
class ConfigurationChanged(Event):
    """One or more configuration keys changed."""

    keys: frozenset[str] = field(default_factory=frozenset)

    def affects(self, section: str) -> bool:
        """Return True if any changed key is section or lives under it."""
        return any(key == section or key.startswith(f"{section}.") for key in self.keys)


@dataclass(frozen=True)
class TasksInvalidated(Event):
    """Published after discovery caches dropped entries; views refresh on it."""

    reason: str = ""


Handler = Callable[[Event], None]


class EventBus:
    """Delivers events to subscribers registered per event type."""

    def __init__(self):
        self._subscriptions: list[tuple[type, Handler]] = []

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """
        Register handler for event_type (and its subclasses).

        Returns:
            A callable that removes the subscription
        """
        entry = (event_type, handler)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscriptions:
                self._subscriptions.remove(entry)

        return unsubscribe

    def publish(self, event: Event) -> None:
        """
        Deliver event to every matching handler.

        A failing handler is logged and does not stop delivery to the others.
        """
        for event_type, handler in list(self._subscriptions):
            if not isinstance(event, event_type):
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler {handler!r} failed on {event!r}: {e}")

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._subscriptions.clear()
