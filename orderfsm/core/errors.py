# orderfsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orderfsm.core.events import OrderEvent
    from orderfsm.core.states import OrderState


class OrderFSMError(Exception):
    """
    Base exception class for errors within the order state machine library.
    """


class EventRejected(OrderFSMError):
    """
    Raised on request when an event had no applicable transition from the
    machine's current state. ``send`` itself never raises this; it is produced
    by ``Outcome.raise_for_rejection``.
    """

    def __init__(self, state: "OrderState", event: "OrderEvent") -> None:
        super().__init__(f"Event {event} not accepted in state {state}")
        self.state = state
        self.event = event


class TransitionError(OrderFSMError):
    """
    Raised when a selected transition could not be completed because its action failed.
    """


class ValidationError(OrderFSMError):
    """
    Raised when a transition table violates the determinism rules.
    """


class ReentrantSendError(OrderFSMError):
    """
    Raised when ``send`` is called on a machine from inside one of its own
    notifications. Each ``send`` runs to completion before the next starts.
    """
