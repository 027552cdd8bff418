# orderfsm/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Optional

from orderfsm.core.events import OrderEvent
from orderfsm.core.states import OrderState

logger = logging.getLogger(__name__)


class StateMachineListener:
    """
    Observer of an order machine. Subclass and override the notifications you
    care about; any object with a subset of these methods is accepted as well.
    Listeners observe outcomes and cannot change them.
    """

    def state_changed(self, source: OrderState, target: OrderState) -> None:
        """Called once per accepted transition that changed the state."""

    def event_not_accepted(self, event: OrderEvent) -> None:
        """Called once per rejected event."""

    def on_error(self, error: Exception) -> None:
        """Called when a selected transition failed and was rolled back."""


class LoggingListener(StateMachineListener):
    """Logs state changes at INFO and rejected events at ERROR."""

    def __init__(self, logger_name: Optional[str] = None) -> None:
        self.logger = logging.getLogger(logger_name or __name__)

    def state_changed(self, source: OrderState, target: OrderState) -> None:
        self.logger.info("State changed to %s", target)

    def event_not_accepted(self, event: OrderEvent) -> None:
        self.logger.error("Event not accepted: %s", event)

    def on_error(self, error: Exception) -> None:
        self.logger.error("Transition failed: %s", error)


class ListenerManager:
    """
    Manages registration of listeners and dispatch of notifications to them.
    Dispatch and (un)registration are mutually exclusive, so once
    ``unregister`` returns the listener receives nothing further.
    """

    def __init__(self, listeners: Optional[Iterable[Any]] = None) -> None:
        """
        :param listeners: Initial listeners, notified in registration order.
        """
        self._lock = threading.RLock()
        self._listeners: List[Any] = list(listeners or [])
        self._invoker = _ListenerInvoker()

    @property
    def listeners(self) -> List[Any]:
        with self._lock:
            return list(self._listeners)

    def register(self, listener: Any) -> None:
        """
        Add a listener. Registering the same object twice has no effect.
        """
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unregister(self, listener: Any) -> None:
        """
        Remove a listener. Unknown listeners are ignored.
        """
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify_state_changed(self, source: OrderState, target: OrderState) -> None:
        self._dispatch("state_changed", source, target)

    def notify_event_not_accepted(self, event: OrderEvent) -> None:
        self._dispatch("event_not_accepted", event)

    def notify_error(self, error: Exception) -> None:
        self._dispatch("on_error", error)

    def _dispatch(self, method: str, *args: Any) -> None:
        with self._lock:
            for listener in list(self._listeners):
                # A listener may unregister another one mid-dispatch.
                if listener in self._listeners:
                    self._invoker.invoke(listener, method, *args)


class _ListenerInvoker:
    """
    Internal helper that calls one notification method on one listener,
    isolating the machine and the other listeners from its failures.
    """

    def invoke(self, listener: Any, method: str, *args: Any) -> None:
        callback = getattr(listener, method, None)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("%s %s failed", type(listener).__name__, method)
