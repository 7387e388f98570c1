"""Single-flight, time-bounded cache of the product package."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from provisioner.domain.models.catalog import ProductPackage
from provisioner.domain.models.errors import (
    CatalogAuthorizationError,
    CatalogUnavailableError,
)
from provisioner.domain.models.polling import PollPolicy
from provisioner.domain.ports.services import CatalogGateway, WorkflowTelemetry
from provisioner.domain.services.polling import BoundedPoller


logger = structlog.get_logger(__name__)

# asyncio.TimeoutError is only an alias of TimeoutError from Python 3.11 on
TRANSIENT_ERRORS = (CatalogUnavailableError, TimeoutError, asyncio.TimeoutError)


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of one attempt to fetch the package."""

    package: ProductPackage | None = None
    error: Exception | None = None


async def fetch_package(gateway: CatalogGateway, package_name: str) -> RefreshResult:
    """Look up the active package by name, then fetch its full detail.

    Transient and authorization failures are returned, not raised; anything
    else propagates.
    """
    try:
        ref = await gateway.active_package_by_name(package_name)
        package = await gateway.package_detail(ref.id)
    except (CatalogAuthorizationError, *TRANSIENT_ERRORS) as e:
        return RefreshResult(error=e)
    return RefreshResult(package=package)


class _RefreshAttempts:
    """Probe for the bounded poller; remembers the last attempt's result."""

    def __init__(self, gateway: CatalogGateway, package_name: str) -> None:
        self._gateway = gateway
        self._package_name = package_name
        self.last: RefreshResult | None = None

    async def test(self) -> bool:
        self.last = await fetch_package(self._gateway, self._package_name)
        if self.last.error is None:
            return True
        if isinstance(self.last.error, CatalogAuthorizationError):
            raise self.last.error
        logger.warning(
            "catalog_refresh_retrying",
            package_name=self._package_name,
            error=str(self.last.error),
        )
        return False


class CatalogCache:
    """Memoizes the product package for ``ttl_seconds``.

    Concurrent callers arriving while a refresh is running share it. A failed
    refresh is not cached: every waiter of that refresh receives the error and
    the next caller starts a new one.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        package_name: str,
        ttl_seconds: float,
        refresh_policy: PollPolicy,
        telemetry: WorkflowTelemetry | None = None,
    ) -> None:
        self._gateway = gateway
        self._package_name = package_name
        self._ttl_seconds = ttl_seconds
        self._refresh_policy = refresh_policy
        self._telemetry = telemetry
        self._value: ProductPackage | None = None
        self._expires_at = 0.0
        self._inflight: asyncio.Task[ProductPackage] | None = None

    @property
    def package_name(self) -> str:
        return self._package_name

    async def get(self) -> ProductPackage:
        loop = asyncio.get_running_loop()
        if self._value is not None and loop.time() < self._expires_at:
            return self._value

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh())
            self._inflight.add_done_callback(self._refresh_done)

        # A cancelled caller must not cancel the refresh other callers share
        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        self._value = None
        self._expires_at = 0.0

    def _refresh_done(self, task: asyncio.Task[ProductPackage]) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            task.exception()

    def _record(self, result: str) -> None:
        if self._telemetry is not None:
            self._telemetry.catalog_refreshed(result)

    async def _refresh(self) -> ProductPackage:
        attempts = _RefreshAttempts(self._gateway, self._package_name)
        poller = BoundedPoller(self._refresh_policy, name="catalog_refresh", telemetry=self._telemetry)
        try:
            fetched = await poller.until(attempts.test)
        except CatalogAuthorizationError:
            self._record("unauthorized")
            logger.error("catalog_refresh_unauthorized", package_name=self._package_name)
            raise

        if not fetched or attempts.last is None or attempts.last.package is None:
            self._record("unavailable")
            cause = attempts.last.error if attempts.last is not None else None
            raise CatalogUnavailableError(
                f"package {self._package_name!r} unavailable after "
                f"{self._refresh_policy.max_wait:g}s"
            ) from cause

        package = attempts.last.package
        self._value = package
        self._expires_at = asyncio.get_running_loop().time() + self._ttl_seconds
        self._record("success")
        logger.info(
            "catalog_refreshed",
            package_id=package.id,
            package_name=package.name,
            item_count=len(package.items),
        )
        return package
