# orderfsm/runtime/async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
from typing import Any, Iterable, List, Optional

from orderfsm.core.events import OrderEvent
from orderfsm.core.extended_state import ExtendedState
from orderfsm.core.state_machine import MachineSnapshot, OrderStateMachine, Outcome, create
from orderfsm.core.states import OrderState


class AsyncOrderStateMachine:
    """
    Thin asynchronous facade over an order machine. ``send`` runs the machine
    synchronously on the event loop; it performs no I/O and never awaits, so
    the machine's own lock is what serialises it against every other caller,
    threads included. The asyncio lock only keeps ``send_all`` batches from
    being split by other tasks.

    If worker threads also drive the same machine, a coroutine may block the
    loop while one of them holds the machine lock for the length of one
    transition. Callers that cannot accept that should run ``machine.send`` in
    an executor instead.
    """

    def __init__(self, machine: Optional[OrderStateMachine] = None) -> None:
        """
        :param machine: The machine to drive; a fresh one is created if omitted.
        """
        self._machine = machine if machine is not None else create()
        self._async_lock = asyncio.Lock()

    @property
    def machine(self) -> OrderStateMachine:
        return self._machine

    @property
    def state(self) -> OrderState:
        return self._machine.state

    @property
    def extended_state(self) -> ExtendedState:
        return self._machine.extended_state

    @property
    def paid(self) -> bool:
        return self._machine.paid

    def snapshot(self) -> MachineSnapshot:
        return self._machine.snapshot()

    def register_listener(self, listener: Any) -> None:
        self._machine.register_listener(listener)

    def unregister_listener(self, listener: Any) -> None:
        self._machine.unregister_listener(listener)

    async def send(self, event: OrderEvent) -> Outcome:
        """Process an event; see ``OrderStateMachine.send``."""
        async with self._async_lock:
            return self._machine.send(event)

    async def send_all(self, events: Iterable[OrderEvent]) -> List[Outcome]:
        """
        Process a sequence of events as one uninterrupted batch. Rejections do
        not stop the batch; each event gets its own Outcome.
        """
        async with self._async_lock:
            return [self._machine.send(event) for event in events]
