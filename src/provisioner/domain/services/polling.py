"""Bounded polling of asynchronous vendor milestones."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from provisioner.domain.models.polling import PollPolicy
from provisioner.domain.ports.services import WorkflowTelemetry


logger = structlog.get_logger(__name__)

Probe = Callable[[], Awaitable[bool]]


def next_period(attempt: int, policy: PollPolicy, remaining: float) -> float:
    """Pause before the next attempt: grows with the attempt number, capped.

    Never longer than the time left in the wait.
    """
    period = min(policy.base_period * attempt ** 1.5, policy.cap_period)
    return max(0.0, min(period, remaining))


class BoundedPoller:
    """Re-evaluates a probe until it holds or the policy's wait is exhausted.

    The probe runs on the calling task; exceptions raised by the probe are not
    caught and abort the wait.
    """

    def __init__(
        self,
        policy: PollPolicy,
        name: str = "probe",
        telemetry: WorkflowTelemetry | None = None,
    ) -> None:
        self._policy = policy
        self._name = name
        self._telemetry = telemetry

    @property
    def policy(self) -> PollPolicy:
        return self._policy

    async def until(self, test: Probe) -> bool:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._policy.max_wait
        attempt = 1

        while True:
            if self._telemetry is not None:
                self._telemetry.poll_attempted(self._name)
            if await test():
                logger.debug("poll_succeeded", probe=self._name, attempts=attempt)
                return True

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.debug("poll_exhausted", probe=self._name, attempts=attempt)
                return False

            await asyncio.sleep(next_period(attempt, self._policy, remaining))
            attempt += 1


async def await_condition(
    test: Probe,
    max_wait: float,
    base_period: float,
    cap_period: float,
) -> bool:
    """Poll ``test`` until it returns True or ``max_wait`` seconds have elapsed."""
    policy = PollPolicy(max_wait=max_wait, base_period=base_period, cap_period=cap_period)
    return await BoundedPoller(policy).until(test)
