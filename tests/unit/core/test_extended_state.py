# tests/unit/core/test_extended_state.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging

import pytest

from orderfsm.core.extended_state import ExtendedState


def test_default_is_unpaid():
    assert ExtendedState().paid is False


def test_copy_is_independent():
    original = ExtendedState(paid=True)
    clone = original.copy()
    clone.paid = False
    assert original.paid is True
    assert clone == ExtendedState(paid=False)


def test_restore_from_overwrites_in_place():
    target = ExtendedState(paid=True)
    target.restore_from(ExtendedState(paid=False))
    assert target.paid is False


def test_to_variables():
    assert ExtendedState(paid=True).to_variables() == {"paid": True}


@pytest.mark.parametrize("paid", [True, False])
def test_from_variables_reads_paid(paid, caplog):
    with caplog.at_level(logging.WARNING):
        state = ExtendedState.from_variables({"paid": paid})
    assert state.paid is paid
    assert "Malformed" not in caplog.text


@pytest.mark.parametrize("variables", [{}, {"other": 1}, {"paid": None}, {"paid": "yes"}, {"paid": 2}, {"paid": -1}])
def test_from_variables_defaults_malformed_to_unpaid(variables, caplog):
    """Missing or unrecognised paid entries default to False with a warning."""
    with caplog.at_level(logging.WARNING, logger="orderfsm.core.extended_state"):
        state = ExtendedState.from_variables(variables)
    assert state.paid is False
    assert "Malformed extended state" in caplog.text


@pytest.mark.parametrize("raw, expected", [(1, True), (0, False)])
def test_from_variables_accepts_integer_flags(raw, expected, caplog):
    """Stores that persist booleans as 0/1 restore the flag as written."""
    with caplog.at_level(logging.WARNING, logger="orderfsm.core.extended_state"):
        state = ExtendedState.from_variables({"paid": raw})
    assert state.paid is expected
    assert caplog.records == []
