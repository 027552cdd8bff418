# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest

from orderfsm.core.events import OrderEvent
from orderfsm.core.states import OrderState


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "stress: mark test as a stress test")
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class TraceListener:
    """
    A listener that appends trace records for every notification, so tests can
    compare the sequence against an expected one.
    """

    def __init__(self, trace_list=None):
        self.trace = trace_list if trace_list is not None else []

    def state_changed(self, source: OrderState, target: OrderState):
        self.trace.append(f"CHANGED:{source}->{target}")

    def event_not_accepted(self, event: OrderEvent):
        self.trace.append(f"REJECTED:{event}")

    def on_error(self, error: Exception):
        self.trace.append(f"ERROR:{type(error).__name__}")


@pytest.fixture
def trace_listener():
    """A fresh TraceListener."""
    return TraceListener()


@pytest.fixture
def mock_listener():
    """A listener mock with every notification method."""
    listener = MagicMock()
    listener.state_changed = MagicMock()
    listener.event_not_accepted = MagicMock()
    listener.on_error = MagicMock()
    return listener


@pytest.fixture
def factory():
    """A factory with no default listeners, so tests see only their own."""
    from orderfsm.core.state_machine import OrderStateMachineFactory

    return OrderStateMachineFactory(listeners=[])


@pytest.fixture
def machine(factory, trace_listener):
    """A freshly created machine traced by ``trace_listener``."""
    return factory.create(machine_id="order-1", listeners=[trace_listener])


@pytest.fixture
def restored(factory, trace_listener):
    """Returns a function restoring a traced machine at a given state and paid flag."""
    from orderfsm.core.extended_state import ExtendedState

    def _restore(state: OrderState, paid: bool = False):
        return factory.restore(state, ExtendedState(paid=paid), listeners=[trace_listener])

    return _restore


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive():
            thread.join(timeout=1.0)
