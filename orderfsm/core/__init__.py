"""
Core package: the order lifecycle vocabulary, transition table and engine.

Architecture:
- OrderState / OrderEvent are closed enumerations
- TransitionTable maps (state, event) to guarded candidate transitions
- OrderStateMachine resolves one transition per event and notifies listeners
- OrderStateMachineFactory validates the table once and hands out machines
"""

# Import order matters to avoid circular dependencies
from .states import OrderState
from .events import OrderEvent
from .extended_state import ExtendedState
from .errors import EventRejected, OrderFSMError, ReentrantSendError, TransitionError, ValidationError
from .transitions import INTERNAL, ORDER_TRANSITIONS, Transition, TransitionTable
from .hooks import ListenerManager, LoggingListener, StateMachineListener
from .validations import Validator
from .state_machine import (
    MachineSnapshot,
    OrderStateMachine,
    OrderStateMachineFactory,
    Outcome,
    create,
    restore,
)

__all__ = [
    # Vocabulary
    "OrderState",
    "OrderEvent",
    "ExtendedState",
    # Errors
    "OrderFSMError",
    "EventRejected",
    "ReentrantSendError",
    "TransitionError",
    "ValidationError",
    # Table
    "INTERNAL",
    "ORDER_TRANSITIONS",
    "Transition",
    "TransitionTable",
    "Validator",
    # Notifications
    "ListenerManager",
    "LoggingListener",
    "StateMachineListener",
    # Engine
    "MachineSnapshot",
    "OrderStateMachine",
    "OrderStateMachineFactory",
    "Outcome",
    "create",
    "restore",
]
