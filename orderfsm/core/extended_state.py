# orderfsm/core/extended_state.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

PAID = "paid"


@dataclass(eq=True)
class ExtendedState:
    """
    Mutable payload carried alongside the current state of one order machine.
    Each machine owns its own instance; it is never shared between machines.
    """

    paid: bool = False

    def copy(self) -> "ExtendedState":
        """Return an independent copy, used for snapshots and rollback."""
        return ExtendedState(paid=self.paid)

    def restore_from(self, other: "ExtendedState") -> None:
        """Overwrite every field in place with the values held by ``other``."""
        self.paid = other.paid

    def to_variables(self) -> Dict[str, Any]:
        """Return the fields as a plain variables mapping."""
        return asdict(self)

    @classmethod
    def from_variables(cls, variables: Mapping[str, Any]) -> "ExtendedState":
        """
        Build an extended state from a persisted variables mapping.

        ``paid`` may be a bool or the integers 0 and 1, as stores without a
        boolean column keep it. A missing or unrecognisable entry is treated as
        malformed input: it defaults to ``False`` and a warning is logged, so a
        partially corrupt record still yields a usable machine.

        :param variables: Mapping as stored by a persistence collaborator.
        """
        paid = variables.get(PAID)
        if isinstance(paid, int) and not isinstance(paid, bool) and paid in (0, 1):
            paid = bool(paid)
        if not isinstance(paid, bool):
            logger.warning("Malformed extended state %r: defaulting %s to False", dict(variables), PAID)
            paid = False
        return cls(paid=paid)
