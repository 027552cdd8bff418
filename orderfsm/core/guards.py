# orderfsm/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Callable

from orderfsm.core.extended_state import ExtendedState

Guard = Callable[[ExtendedState], bool]


def is_paid(extended_state: ExtendedState) -> bool:
    """True when the order has been paid."""
    return extended_state.paid


def not_(guard: Guard) -> Guard:
    """
    Negate a guard. Used to build the complementary branch of a guarded pair,
    so the two rows sharing a source and event can never both be eligible.
    """

    def _negated(extended_state: ExtendedState) -> bool:
        return not guard(extended_state)

    _negated.__name__ = f"not_{getattr(guard, '__name__', 'guard')}"
    return _negated
