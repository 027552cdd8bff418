# orderfsm/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Iterator, List, Tuple

from orderfsm.core.errors import ValidationError
from orderfsm.core.events import OrderEvent
from orderfsm.core.extended_state import ExtendedState
from orderfsm.core.states import OrderState
from orderfsm.core.transitions import INTERNAL, Transition, TransitionTable

Gap = Tuple[OrderState, OrderEvent, ExtendedState]


def extended_state_space() -> Iterator[ExtendedState]:
    """Every distinct extended state value a guard can observe."""
    for paid in (False, True):
        yield ExtendedState(paid=paid)


class Validator:
    """
    Performs build-time and test-time validation of a transition table,
    ensuring every row is well-formed and every (state, event) pair resolves
    deterministically.
    """

    def __init__(self) -> None:
        self._rules_engine = _ValidationRulesEngine()

    def validate_table(self, table: TransitionTable) -> None:
        """
        Check every row and the determinism of the whole table.

        :param table: The table to validate.
        :raises ValidationError: If validation fails.
        """
        self._rules_engine.validate_table(table)

    def validate_transition(self, transition: Transition) -> None:
        """
        Check that a single row is well-formed.

        :raises ValidationError: If validation fails.
        """
        self._rules_engine.validate_transition(transition)

    def find_gaps(self, table: TransitionTable) -> List[Gap]:
        """
        List the (state, event, extended state) combinations where rows exist
        but every guard is false, so the event is rejected. Gaps are legal;
        this is a report, not a check.
        """
        gaps = []
        for state in OrderState:
            for event in OrderEvent:
                rows = table.get_transitions(state, event)
                if not rows:
                    continue
                for extended_state in extended_state_space():
                    if not any(t.evaluate_guard(extended_state) for t in rows):
                        gaps.append((state, event, extended_state))
        return gaps


class _ValidationRulesEngine:
    """
    Internal engine applying the rule set. Centralizes validation logic for
    easier maintenance.
    """

    def __init__(self) -> None:
        self._default_rules = _DefaultValidationRules

    def validate_table(self, table: TransitionTable) -> None:
        for transition in table:
            self._default_rules.validate_transition(transition)
        self._default_rules.validate_determinism(table)

    def validate_transition(self, transition: Transition) -> None:
        self._default_rules.validate_transition(transition)


class _DefaultValidationRules:
    """
    Built-in rules for order transition tables.
    """

    @staticmethod
    def validate_transition(transition: Transition) -> None:
        """
        Check source, event and target types, and that guard and action are callable.
        """
        if not isinstance(transition.source, OrderState):
            raise ValidationError(f"Transition source {transition.source!r} is not an OrderState.")
        if not isinstance(transition.event, OrderEvent):
            raise ValidationError(f"Transition event {transition.event!r} is not an OrderEvent.")
        if transition.target is not INTERNAL and not isinstance(transition.target, OrderState):
            raise ValidationError(f"Transition target {transition.target!r} is neither an OrderState nor INTERNAL.")
        if transition.guard is not None and not callable(transition.guard):
            raise ValidationError("Transition guards must be callable.")
        if transition.action is not None and not callable(transition.action):
            raise ValidationError("Transition actions must be callable.")

    @staticmethod
    def validate_determinism(table: TransitionTable) -> None:
        """
        For every (state, event) pair and every extended state value, at most
        one row may be eligible. Guards sharing a source and event must be
        mutually exclusive.
        """
        for state in OrderState:
            for event in OrderEvent:
                rows = table.get_transitions(state, event)
                if len(rows) < 2:
                    continue
                for extended_state in extended_state_space():
                    try:
                        eligible = [t for t in rows if t.evaluate_guard(extended_state)]
                    except Exception as e:
                        raise ValidationError(f"Guard evaluation failed for {state}/{event}: {e}") from e
                    if len(eligible) > 1:
                        raise ValidationError(
                            f"Ambiguous transitions for {event} in {state} with {extended_state}: {eligible}"
                        )
