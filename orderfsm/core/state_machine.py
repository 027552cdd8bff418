# orderfsm/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from orderfsm.core.actions import initial_action
from orderfsm.core.errors import EventRejected, ReentrantSendError, TransitionError
from orderfsm.core.events import OrderEvent
from orderfsm.core.extended_state import ExtendedState
from orderfsm.core.hooks import ListenerManager, LoggingListener
from orderfsm.core.states import INITIAL_STATE, OrderState
from orderfsm.core.transitions import ORDER_TRANSITIONS, TransitionTable
from orderfsm.core.validations import Validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """
    Result of sending one event.

    Attributes:
        accepted: Whether a transition fired.
        state: The machine's state after the call.
        event: The event that was sent.
    """

    accepted: bool
    state: OrderState
    event: OrderEvent

    @classmethod
    def accept(cls, state: OrderState, event: OrderEvent) -> "Outcome":
        return cls(accepted=True, state=state, event=event)

    @classmethod
    def reject(cls, state: OrderState, event: OrderEvent) -> "Outcome":
        return cls(accepted=False, state=state, event=event)

    @property
    def rejected(self) -> bool:
        return not self.accepted

    def raise_for_rejection(self) -> "Outcome":
        """Raise EventRejected if the event was rejected, otherwise return self."""
        if not self.accepted:
            raise EventRejected(self.state, self.event)
        return self

    def __bool__(self) -> bool:
        return self.accepted


@dataclass(frozen=True)
class MachineSnapshot:
    """The (state, paid) pair a persistence collaborator needs to restore a machine."""

    state: OrderState
    paid: bool

    def extended_state(self) -> ExtendedState:
        return ExtendedState(paid=self.paid)


class OrderStateMachine:
    """
    The state machine of a single order. Holds the current state and the
    order's extended state, and changes them only through ``send``.

    Each ``send`` runs under the instance lock: guard evaluation, action,
    state update and listener dispatch form one step relative to other calls
    on the same machine. Distinct machines share no mutable state.
    """

    def __init__(
        self,
        state: OrderState,
        extended_state: ExtendedState,
        table: TransitionTable = ORDER_TRANSITIONS,
        listeners: Optional[Iterable[Any]] = None,
        machine_id: Optional[str] = None,
    ) -> None:
        """
        Prefer ``create`` or ``restore`` over calling this directly.

        :param state: The current state.
        :param extended_state: The extended state; the machine takes ownership of it.
        :param table: Transition table shared by all machines of this kind.
        :param listeners: Objects notified of state changes and rejected events.
        :param machine_id: Identifier used in log records; generated if omitted.
        """
        self._lock = threading.RLock()
        self._state = state
        self._extended_state = extended_state
        self._table = table
        self._listeners = ListenerManager(listeners)
        self._machine_id = machine_id or uuid.uuid4().hex
        self._sending = False

    @property
    def machine_id(self) -> str:
        return self._machine_id

    @property
    def state(self) -> OrderState:
        """Get the current state."""
        with self._lock:
            return self._state

    @property
    def extended_state(self) -> ExtendedState:
        """A copy of the extended state; mutating it does not affect the machine."""
        with self._lock:
            return self._extended_state.copy()

    @property
    def paid(self) -> bool:
        with self._lock:
            return self._extended_state.paid

    @property
    def table(self) -> TransitionTable:
        return self._table

    @property
    def listeners(self) -> List[Any]:
        return self._listeners.listeners

    def snapshot(self) -> MachineSnapshot:
        """Read state and paid together, consistent with respect to ``send``."""
        with self._lock:
            return MachineSnapshot(state=self._state, paid=self._extended_state.paid)

    def register_listener(self, listener: Any) -> None:
        """
        Subscribe to ``state_changed``, ``event_not_accepted`` and ``on_error``
        notifications. See ``StateMachineListener``.
        """
        with self._lock:
            self._listeners.register(listener)

    def unregister_listener(self, listener: Any) -> None:
        """Unsubscribe; no notification reaches the listener after this returns."""
        with self._lock:
            self._listeners.unregister(listener)

    def send(self, event: OrderEvent) -> Outcome:
        """
        Evaluate an event against the transition table for the current state.

        :param event: The event to process.
        :return: An accepted Outcome carrying the new state, or a rejected one.
            A rejected event leaves state and extended state untouched.
        :raises TypeError: If ``event`` is not an OrderEvent.
        :raises TransitionError: If a guard or the selected transition's action
            fails; the machine is left as it was before the call.
        :raises ReentrantSendError: If called from inside this machine's own
            notification dispatch.
        """
        if not isinstance(event, OrderEvent):
            raise TypeError(f"Expected an OrderEvent, got {event!r}")

        with self._lock:
            # Set only while the lock is held, so seeing it here means a listener re-entered.
            if self._sending:
                raise ReentrantSendError(
                    f"Machine {self._machine_id} cannot process {event} while it is still processing another event"
                )
            self._sending = True
            try:
                return self._process(event)
            finally:
                self._sending = False

    def _process(self, event: OrderEvent) -> Outcome:
        source = self._state
        try:
            transition = self._table.resolve(source, event, self._extended_state)
        except TransitionError as error:
            self._listeners.notify_error(error)
            raise
        if transition is None:
            logger.debug("Machine %s rejected %s in %s", self._machine_id, event, source)
            self._listeners.notify_event_not_accepted(event)
            return Outcome.reject(source, event)

        backup = self._extended_state.copy()
        try:
            transition.execute_action(self._extended_state)
        except TransitionError as error:
            self._extended_state.restore_from(backup)
            self._listeners.notify_error(error)
            raise

        target = transition.resulting_state()
        self._state = target
        logger.debug("Machine %s accepted %s: %s -> %s", self._machine_id, event, source, target)
        if not transition.is_internal:
            self._listeners.notify_state_changed(source, target)
        return Outcome.accept(target, event)

    def __repr__(self) -> str:
        snapshot = self.snapshot()
        return f"OrderStateMachine(id={self._machine_id}, state={snapshot.state}, paid={snapshot.paid})"


class OrderStateMachineFactory:
    """
    Hands out order machines that share one validated transition table and a
    set of default listeners (a LoggingListener unless told otherwise).
    """

    def __init__(
        self,
        table: TransitionTable = ORDER_TRANSITIONS,
        listeners: Optional[Iterable[Any]] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        """
        :param table: The transition table; validated once here.
        :param listeners: Listeners attached to every machine. Defaults to a LoggingListener.
        :param validator: Validator for the table.
        :raises ValidationError: If the table is not deterministic or is malformed.
        """
        self._validator = validator or Validator()
        self._validator.validate_table(table)
        self._table = table
        self._listeners = list(listeners) if listeners is not None else [LoggingListener()]

    @property
    def table(self) -> TransitionTable:
        return self._table

    def create(self, machine_id: Optional[str] = None, listeners: Optional[Iterable[Any]] = None) -> OrderStateMachine:
        """
        Build a fresh machine at the initial state. The initial state's action
        runs here, exactly once per machine, leaving ``paid`` False.

        :param machine_id: Optional identifier; generated if omitted.
        :param listeners: Extra listeners for this machine only.
        """
        extended_state = ExtendedState()
        initial_action(extended_state)
        return self._build(INITIAL_STATE, extended_state, machine_id, listeners)

    def restore(
        self,
        state: Union[OrderState, str],
        extended_state: Union[ExtendedState, Mapping[str, Any]],
        machine_id: Optional[str] = None,
        listeners: Optional[Iterable[Any]] = None,
    ) -> OrderStateMachine:
        """
        Rebuild a machine from persisted values without running the initial
        state's action, so ``paid`` is taken as given even in ``Open``.

        :param state: The persisted state, as an OrderState or its name.
        :param extended_state: An ExtendedState (copied) or a persisted variables
            mapping. A mapping missing ``paid`` yields ``paid=False``.
        :raises ValueError: If ``state`` names no OrderState.
        """
        if not isinstance(state, OrderState):
            state = OrderState(state)
        if isinstance(extended_state, ExtendedState):
            extended_state = extended_state.copy()
        else:
            extended_state = ExtendedState.from_variables(extended_state)
        return self._build(state, extended_state, machine_id, listeners)

    def _build(
        self,
        state: OrderState,
        extended_state: ExtendedState,
        machine_id: Optional[str],
        listeners: Optional[Iterable[Any]],
    ) -> OrderStateMachine:
        machine = OrderStateMachine(
            state,
            extended_state,
            table=self._table,
            listeners=self._listeners + list(listeners or []),
            machine_id=machine_id,
        )
        logger.debug("Built %r", machine)
        return machine


_default_factory = OrderStateMachineFactory()


def create(machine_id: Optional[str] = None, listeners: Optional[Iterable[Any]] = None) -> OrderStateMachine:
    """Create a fresh order machine from the default factory."""
    return _default_factory.create(machine_id=machine_id, listeners=listeners)


def restore(
    state: Union[OrderState, str],
    extended_state: Union[ExtendedState, Mapping[str, Any]],
    machine_id: Optional[str] = None,
    listeners: Optional[Iterable[Any]] = None,
) -> OrderStateMachine:
    """Restore an order machine from persisted values using the default factory."""
    return _default_factory.restore(state, extended_state, machine_id=machine_id, listeners=listeners)
