# orderfsm/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from orderfsm.core.actions import Action, receive_payment, refund_payment
from orderfsm.core.errors import TransitionError
from orderfsm.core.events import OrderEvent
from orderfsm.core.extended_state import ExtendedState
from orderfsm.core.guards import Guard, is_paid, not_
from orderfsm.core.states import OrderState

logger = logging.getLogger(__name__)


class _Internal:
    """Marker target for transitions that fire without leaving the source state."""

    def __repr__(self) -> str:
        return "INTERNAL"


INTERNAL = _Internal()

Target = Union[OrderState, _Internal]


class Transition:
    """
    Defines a possible path out of a source state for one event, optionally
    gated by a guard and optionally running an action on the extended state.
    A transition whose target is ``INTERNAL`` runs its action but leaves the
    current state unchanged.
    """

    def __init__(
        self,
        source: OrderState,
        event: OrderEvent,
        target: Target,
        guard: Optional[Guard] = None,
        action: Optional[Action] = None,
    ) -> None:
        """
        :param source: The state this transition leaves.
        :param event: The event that triggers it.
        :param target: The destination state, or ``INTERNAL``.
        :param guard: Predicate over the extended state; absent means always eligible.
        :param action: Procedure run on the extended state when the transition fires.
        """
        self._source = source
        self._event = event
        self._target = target
        self._guard = guard
        self._action = action

    @property
    def source(self) -> OrderState:
        return self._source

    @property
    def event(self) -> OrderEvent:
        return self._event

    @property
    def target(self) -> Target:
        return self._target

    @property
    def guard(self) -> Optional[Guard]:
        return self._guard

    @property
    def action(self) -> Optional[Action]:
        return self._action

    @property
    def is_internal(self) -> bool:
        """True if firing this transition keeps the machine in its source state."""
        return self._target is INTERNAL

    def resulting_state(self) -> OrderState:
        """The state the machine is in after this transition fires."""
        return self._source if self.is_internal else self._target

    def evaluate_guard(self, extended_state: ExtendedState) -> bool:
        """
        Decide whether the transition is eligible.

        :param extended_state: The machine's extended state; guards must not mutate it.
        :return: True if there is no guard or the guard passes.
        :raises TransitionError: If the guard fails.
        """
        if self._guard is None:
            return True
        try:
            return bool(self._guard(extended_state))
        except Exception as e:
            raise TransitionError(f"Guard evaluation failed for {self!r}: {e}") from e

    def execute_action(self, extended_state: ExtendedState) -> None:
        """
        Run the transition's action, if any.

        :param extended_state: The machine's extended state.
        :raises TransitionError: If the action fails.
        """
        if self._action is None:
            return
        try:
            self._action(extended_state)
        except Exception as e:
            raise TransitionError(f"Action execution failed for {self!r}: {e}") from e

    def __repr__(self) -> str:
        guard = getattr(self._guard, "__name__", None)
        suffix = f" [{guard}]" if guard else ""
        return f"Transition({self._source} --{self._event}{suffix}--> {self._target!r})"


class TransitionTable:
    """
    Immutable mapping from (source state, event) to the candidate transitions
    in definition order. Built once and shared by every machine using it.
    """

    def __init__(self, transitions: Iterable[Transition]) -> None:
        self._transitions: Tuple[Transition, ...] = tuple(transitions)
        index: Dict[Tuple[OrderState, OrderEvent], List[Transition]] = {}
        for t in self._transitions:
            index.setdefault((t.source, t.event), []).append(t)
        self._index: Dict[Tuple[OrderState, OrderEvent], Tuple[Transition, ...]] = {
            key: tuple(rows) for key, rows in index.items()
        }

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._transitions)

    def __len__(self) -> int:
        return len(self._transitions)

    def get_transitions(self, source: OrderState, event: OrderEvent) -> Tuple[Transition, ...]:
        """Return every row defined for ``(source, event)``, in definition order."""
        return self._index.get((source, event), ())

    def accepted_events(self, source: OrderState) -> FrozenSet[OrderEvent]:
        """Events that have at least one row out of ``source``, guarded or not."""
        return frozenset(event for (state, event) in self._index if state is source)

    def resolve(
        self, source: OrderState, event: OrderEvent, extended_state: ExtendedState
    ) -> Optional[Transition]:
        """
        Select the transition to fire: the first row for ``(source, event)``
        whose guard is absent or true.

        :return: The selected transition, or None if the event is not accepted.
        :raises TransitionError: If a guard fails.
        """
        for transition in self.get_transitions(source, event):
            if transition.evaluate_guard(extended_state):
                logger.debug("Resolved %s in %s to %r", event, source, transition)
                return transition
        logger.debug("No transition for %s in %s", event, source)
        return None


ORDER_TRANSITIONS = TransitionTable(
    [
        Transition(OrderState.Open, OrderEvent.ReceivePayment, OrderState.ReadyForDelivery, action=receive_payment),
        Transition(OrderState.Open, OrderEvent.UnlockDelivery, OrderState.ReadyForDelivery),
        Transition(OrderState.Open, OrderEvent.Cancel, OrderState.Canceled),
        Transition(OrderState.ReadyForDelivery, OrderEvent.Deliver, OrderState.Completed, guard=is_paid),
        Transition(OrderState.ReadyForDelivery, OrderEvent.Deliver, OrderState.AwaitingPayment, guard=not_(is_paid)),
        # No unguarded fallback: an unpaid order cannot be refunded before delivery.
        Transition(
            OrderState.ReadyForDelivery,
            OrderEvent.Refund,
            OrderState.Canceled,
            guard=is_paid,
            action=refund_payment,
        ),
        Transition(OrderState.ReadyForDelivery, OrderEvent.Cancel, OrderState.Canceled),
        Transition(OrderState.ReadyForDelivery, OrderEvent.ReceivePayment, INTERNAL, action=receive_payment),
        Transition(OrderState.AwaitingPayment, OrderEvent.ReceivePayment, OrderState.Completed, action=receive_payment),
        Transition(OrderState.Completed, OrderEvent.Refund, OrderState.Canceled, action=refund_payment),
        # Reopen carries no action, so paid survives a cancel/reopen cycle.
        Transition(OrderState.Canceled, OrderEvent.Reopen, OrderState.Open),
        Transition(OrderState.Canceled, OrderEvent.ReceivePayment, INTERNAL, action=receive_payment),
    ]
)
