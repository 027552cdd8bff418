"""orderfsm: order lifecycle finite state machine

Models the lifecycle of a single order as a deterministic, guarded transition
table over a small extended state (the ``paid`` flag).

Responsibilities:
    - Order state and event vocabulary
    - Guard/action evaluation in table order
    - Per-order machine instances with listener notifications

Cross-cutting Concerns:
    Thread Safety:
        - Each machine serialises its own ``send`` calls
        - Machines share no mutable state

    Error Handling:
        - Rejected events are outcomes, not exceptions
        - Failed actions roll back and raise TransitionError

    Logging:
        - Standard library logging, one logger per module
        - No handlers configured by the library
"""

import logging

from orderfsm.core import (
    ExtendedState,
    OrderEvent,
    OrderState,
    OrderStateMachine,
    OrderStateMachineFactory,
    Outcome,
    create,
    restore,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ExtendedState",
    "OrderEvent",
    "OrderState",
    "OrderStateMachine",
    "OrderStateMachineFactory",
    "Outcome",
    "create",
    "restore",
]
