# orderfsm/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from enum import Enum


class OrderState(Enum):
    """
    Lifecycle stages of a single order. Exactly one is current per machine.
    """

    Open = "Open"
    ReadyForDelivery = "ReadyForDelivery"
    AwaitingPayment = "AwaitingPayment"
    Completed = "Completed"
    Canceled = "Canceled"

    def __str__(self) -> str:
        return self.value


INITIAL_STATE = OrderState.Open
