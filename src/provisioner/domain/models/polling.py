"""Polling policy and workflow stage models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field, model_validator

from provisioner.domain.models.base import ValueObject


class ProvisioningStage(str, Enum):
    """Bounded waits of the create and destroy workflows."""

    ORDER_DISCOVERY = "order_discovery"
    TRANSACTIONS_STARTED = "transactions_started"
    TRANSACTIONS_ENDED = "transactions_ended"
    LOGIN_DETAILS = "login_details"


class PollPolicy(ValueObject):
    """Retry envelope for one bounded wait, in seconds.

    ``base_period`` is the first pause between attempts; later pauses grow
    until they reach ``cap_period``. The whole wait never exceeds
    ``max_wait``.
    """

    max_wait: float = Field(ge=0)
    base_period: float = Field(gt=0)
    cap_period: float = Field(gt=0)

    @model_validator(mode="after")
    def _check_periods(self) -> PollPolicy:
        if self.cap_period < self.base_period:
            raise ValueError(
                f"cap_period ({self.cap_period}) must not be lower than "
                f"base_period ({self.base_period})"
            )
        return self
