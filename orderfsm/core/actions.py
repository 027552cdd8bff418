# orderfsm/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from typing import Callable

from orderfsm.core.extended_state import ExtendedState

logger = logging.getLogger(__name__)

Action = Callable[[ExtendedState], None]


def set_paid(extended_state: ExtendedState) -> None:
    logger.info("Setting paid")
    extended_state.paid = True


def set_unpaid(extended_state: ExtendedState) -> None:
    logger.info("Unsetting paid")
    extended_state.paid = False


# Named actions bound into the transition table.
receive_payment: Action = set_paid
refund_payment: Action = set_unpaid

# Runs once when a machine is created, never on a later return to Open.
initial_action: Action = set_unpaid
