# orderfsm/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum


class OrderEvent(Enum):
    """
    External stimuli that request a transition of an order's state machine.
    Any value may be sent in any state; unmatched events are rejected, not raised.
    """

    UnlockDelivery = "UnlockDelivery"
    ReceivePayment = "ReceivePayment"
    Refund = "Refund"
    Deliver = "Deliver"
    Reopen = "Reopen"
    Cancel = "Cancel"

    def __str__(self) -> str:
        return self.value
