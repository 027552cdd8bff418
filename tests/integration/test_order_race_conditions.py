# tests/integration/test_order_race_conditions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from orderfsm.core.events import OrderEvent
from orderfsm.core.extended_state import ExtendedState
from orderfsm.core.state_machine import OrderStateMachineFactory
from orderfsm.core.states import OrderState


class ChainRecorder:
    """Records state changes so tests can check they form an unbroken chain."""

    def __init__(self):
        self.changes = []
        self.lock = threading.Lock()

    def state_changed(self, source, target):
        with self.lock:
            self.changes.append((source, target))


@pytest.mark.stress
def test_concurrent_sends_on_one_machine_are_serialised():
    recorder = ChainRecorder()
    factory = OrderStateMachineFactory(listeners=[])
    machine = factory.restore(OrderState.Completed, ExtendedState(paid=True), listeners=[recorder])

    events = [OrderEvent.Refund, OrderEvent.Reopen, OrderEvent.ReceivePayment, OrderEvent.Deliver] * 200
    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(machine.send, events))

    assert len(recorder.changes) <= sum(1 for o in outcomes if o.accepted)
    for (_, previous_target), (next_source, _) in zip(recorder.changes, recorder.changes[1:]):
        assert previous_target is next_source
    if recorder.changes:
        assert recorder.changes[0][0] is OrderState.Completed
        assert recorder.changes[-1][1] is machine.state


@pytest.mark.stress
def test_concurrent_payments_on_distinct_machines():
    factory = OrderStateMachineFactory(listeners=[])
    machines = [factory.create() for _ in range(50)]
    paying = machines[::2]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda m: m.send(OrderEvent.ReceivePayment), paying))

    for index, machine in enumerate(machines):
        if index % 2 == 0:
            assert machine.snapshot().state is OrderState.ReadyForDelivery
            assert machine.paid is True
        else:
            assert machine.snapshot().state is OrderState.Open
            assert machine.paid is False


def test_unregister_while_sending_stops_notifications():
    factory = OrderStateMachineFactory(listeners=[])
    machine = factory.create()
    recorder = ChainRecorder()
    machine.register_listener(recorder)

    stop = threading.Event()

    def churn():
        while not stop.is_set():
            machine.send(OrderEvent.Cancel)
            machine.send(OrderEvent.Reopen)

    worker = threading.Thread(target=churn)
    worker.start()
    try:
        machine.unregister_listener(recorder)
        seen = len(recorder.changes)
        stop.wait(0.05)
        assert len(recorder.changes) == seen
    finally:
        stop.set()
        worker.join(timeout=1.0)
