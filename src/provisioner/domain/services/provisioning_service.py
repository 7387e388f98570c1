"""Domain service orchestrating resource provisioning and decommissioning."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from contextlib import AbstractContextManager, nullcontext
from functools import partial

import structlog

from provisioner.domain.events.resource_events import (
    ResourceDestroyed,
    ResourceOrdered,
    ResourceProvisioned,
    StageTimedOut,
)
from provisioner.domain.models.base import DomainEvent
from provisioner.domain.models.catalog import Datacenter, HardwareProfile, ProductItem
from provisioner.domain.models.errors import (
    BillingCancellationError,
    InvalidNodeIdError,
    NotBillableError,
    ProvisioningError,
    StageTimeoutError,
    UnsupportedLifecycleOperationError,
)
from provisioner.domain.models.node import (
    LoginCredentials,
    NodeAndCredentials,
    NodeMetadata,
    NodeTemplate,
)
from provisioner.domain.models.order import Order, OrderReceipt, ResourceDraft
from provisioner.domain.models.polling import PollPolicy, ProvisioningStage
from provisioner.domain.models.resource import Resource, ResourceKind
from provisioner.domain.ports.services import EventPublisher, VendorGateway, WorkflowTelemetry
from provisioner.domain.services import hardware
from provisioner.domain.services.catalog_cache import CatalogCache
from provisioner.domain.services.polling import BoundedPoller, Probe
from provisioner.domain.services.probes import (
    LoginDetailsPresent,
    OrderApprovedAndDiscovered,
    TransactionsEnded,
    TransactionsStarted,
)
from provisioner.domain.services.status import resource_to_node
from provisioner.domain.services.transactions import TransactionTracker


logger = structlog.get_logger(__name__)

# Lifecycle operations bare-metal servers cannot perform
_BARE_METAL_UNSUPPORTED = frozenset({"reboot", "suspend", "resume"})


def _parse_node_id(node_id: str | int) -> int:
    try:
        return int(node_id)
    except (TypeError, ValueError) as e:
        raise InvalidNodeIdError(node_id) from e


class ProvisioningOrchestrator:
    """Sequences the bounded waits of the create and destroy workflows.

    Every stage has its own poll policy. A stage that exhausts its wait aborts
    the call with :class:`StageTimeoutError`; later stages are not attempted
    and whatever the vendor already created is left in place.

    Each call creates its own :class:`TransactionTracker`, so concurrent calls
    for different resources never share tracking state.
    """

    def __init__(
        self,
        gateway: VendorGateway,
        catalog: CatalogCache,
        kind: ResourceKind,
        policies: dict[ProvisioningStage, PollPolicy],
        baseline_prices: Iterable[int],
        port_speed: int,
        event_publisher: EventPublisher | None = None,
        telemetry: WorkflowTelemetry | None = None,
    ) -> None:
        missing = [stage.value for stage in ProvisioningStage if stage not in policies]
        if missing:
            raise ValueError(f"no poll policy for stages: {', '.join(missing)}")

        self._gateway = gateway
        self._catalog = catalog
        self._kind = kind
        self._policies = dict(policies)
        self._baseline_prices = list(baseline_prices)
        self._port_speed = port_speed
        self._event_publisher = event_publisher
        self._telemetry = telemetry

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _publish(self, event: DomainEvent) -> None:
        if self._event_publisher is not None:
            await self._event_publisher.publish_event(event)

    def _stage_span(self, name: str, resource_ref: str) -> AbstractContextManager[None]:
        if self._telemetry is None:
            return nullcontext()
        return self._telemetry.stage_span(name, resource_ref)

    def _stage_finished(
        self, workflow: str, stage: ProvisioningStage, outcome: str, started_at: float
    ) -> None:
        if self._telemetry is not None:
            duration = asyncio.get_running_loop().time() - started_at
            self._telemetry.stage_finished(workflow, stage.value, outcome, duration)

    async def _gate(
        self,
        workflow: str,
        stage: ProvisioningStage,
        resource_ref: str,
        test: Probe,
    ) -> None:
        """Poll ``test`` under the stage's policy; raise if it never holds."""
        policy = self._policies[stage]
        poller = BoundedPoller(policy, name=stage.value, telemetry=self._telemetry)
        started_at = asyncio.get_running_loop().time()

        logger.info(
            "stage_waiting",
            workflow=workflow,
            stage=stage.value,
            resource=resource_ref,
            max_wait=policy.max_wait,
        )
        with self._stage_span(f"{workflow}.{stage.value}", resource_ref):
            try:
                passed = await poller.until(test)
            except Exception:
                self._stage_finished(workflow, stage, "failed", started_at)
                raise
            self._stage_finished(workflow, stage, "passed" if passed else "timed_out", started_at)

        if not passed:
            logger.warning(
                "stage_timed_out",
                workflow=workflow,
                stage=stage.value,
                resource=resource_ref,
                max_wait=policy.max_wait,
            )
            await self._publish(
                StageTimedOut(stage=stage.value, resource_ref=resource_ref, max_wait=policy.max_wait)
            )
            raise StageTimeoutError(stage.value, resource_ref, policy.max_wait)

        logger.info("stage_passed", workflow=workflow, stage=stage.value, resource=resource_ref)

    async def _await_transactions(self, workflow: str, resource: Resource) -> None:
        tracker = TransactionTracker(self._gateway, self._event_publisher)
        ref = f"resource({resource.id})"
        await self._gate(
            workflow,
            ProvisioningStage.TRANSACTIONS_STARTED,
            ref,
            partial(TransactionsStarted(tracker).test, resource),
        )
        await self._gate(
            workflow,
            ProvisioningStage.TRANSACTIONS_ENDED,
            ref,
            partial(TransactionsEnded(tracker).test, resource),
        )

    # ------------------------------------------------------------------
    # Create / destroy workflows
    # ------------------------------------------------------------------

    async def build_order(self, hostname: str, template: NodeTemplate) -> Order:
        """Resolve a template against the cached catalog into an order."""
        package = await self._catalog.get()
        prices = hardware.resolve_prices(
            package, template, self._port_speed, self._baseline_prices
        )
        return Order(
            package_id=package.id,
            location=template.location,
            prices=prices,
            resource=ResourceDraft(hostname=hostname, domain=template.domain),
        )

    async def create_node(self, hostname: str, template: NodeTemplate) -> NodeAndCredentials:
        """Order a resource and wait until it is ready to log into."""
        order = await self.build_order(hostname, template)

        with structlog.contextvars.bound_contextvars(workflow="create", hostname=hostname):
            logger.info(
                "order_submitting",
                domain=template.domain,
                location=template.location,
                price_ids=order.price_ids,
            )
            receipt = await self._gateway.submit_order(order)
            if self._telemetry is not None:
                self._telemetry.order_submitted(self._kind.value)
            await self._publish(ResourceOrdered(order_id=receipt.order_id, hostname=hostname))
            logger.info("order_submitted", order_id=receipt.order_id)

            resource = await self._discover(receipt)
            await self._await_transactions("create", resource)
            await self._gate(
                "create",
                ProvisioningStage.LOGIN_DETAILS,
                f"resource({resource.id})",
                partial(LoginDetailsPresent(self._gateway).test, resource),
            )

            ready = await self._gateway.get_resource(resource.id)
            if ready is None or not ready.has_login_details:
                raise ProvisioningError(f"resource({resource.id}) lost its login details")

            password = ready.operating_system.passwords[0]  # type: ignore[union-attr]
            await self._publish(ResourceProvisioned(resource_id=ready.id, hostname=ready.hostname))
            logger.info("resource_provisioned", resource_id=ready.id)
            return NodeAndCredentials(
                resource=ready,
                node_id=str(ready.id),
                credentials=LoginCredentials(user=password.username, password=password.password),
            )

    async def _discover(self, receipt: OrderReceipt) -> Resource:
        """Wait for the order approval and for the resource to be listed.

        Runs even when the receipt echoes the resource: the echoed snapshot
        may be stale or incomplete.
        """
        if receipt.resource is not None:
            logger.debug("receipt_echoed_resource", resource_id=receipt.resource.id)

        discovery = OrderApprovedAndDiscovered(self._gateway)
        await self._gate(
            "create",
            ProvisioningStage.ORDER_DISCOVERY,
            receipt.order.resource.hostname,
            partial(discovery.test, receipt),
        )
        if discovery.discovered is None:
            raise ProvisioningError(f"order {receipt.order_id} passed discovery without a resource")

        logger.info("resource_discovered", resource_id=discovery.discovered.id)
        return discovery.discovered

    def _destroy_finished(self, result: str) -> None:
        if self._telemetry is not None:
            self._telemetry.destroy_finished(self._kind.value, result)

    async def destroy_node(self, node_id: str | int) -> None:
        """Cancel a resource's billing item and wait for its transactions to finish.

        Destroying a resource that does not exist is a no-op.
        """
        resource_id = _parse_node_id(node_id)
        with structlog.contextvars.bound_contextvars(workflow="destroy", resource_id=resource_id):
            resource = await self._gateway.get_resource(resource_id)
            if resource is None:
                self._destroy_finished("absent")
                logger.info("destroy_skipped_absent")
                return

            if not resource.has_billing_item:
                self._destroy_finished("not_billable")
                raise NotBillableError(resource_id)

            billing_item_id: int = resource.billing_item_id  # type: ignore[assignment]
            logger.info("billing_item_cancelling", billing_item_id=billing_item_id)
            if not await self._gateway.cancel_billing_item(billing_item_id):
                self._destroy_finished("refused")
                raise BillingCancellationError(resource_id, billing_item_id)

            try:
                await self._await_transactions("destroy", resource)
            except StageTimeoutError:
                self._destroy_finished("timed_out")
                raise

            self._destroy_finished("destroyed")
            await self._publish(ResourceDestroyed(resource_id=resource_id))
            logger.info("resource_destroyed")

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def _check_supported(self, operation: str) -> None:
        if self._kind == ResourceKind.BARE_METAL and operation in _BARE_METAL_UNSUPPORTED:
            raise UnsupportedLifecycleOperationError(operation, self._kind.value)

    async def reboot_node(self, node_id: str | int) -> None:
        self._check_supported("reboot")
        await self._gateway.reboot(_parse_node_id(node_id))

    async def suspend_node(self, node_id: str | int) -> None:
        self._check_supported("suspend")
        await self._gateway.suspend(_parse_node_id(node_id))

    async def resume_node(self, node_id: str | int) -> None:
        self._check_supported("resume")
        await self._gateway.resume(_parse_node_id(node_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_node(self, node_id: str | int) -> Resource | None:
        return await self._gateway.get_resource(_parse_node_id(node_id))

    async def list_nodes(self) -> list[Resource]:
        """Resources that are billable; quotes and half-created orders are skipped."""
        nodes = []
        for resource in await self._gateway.list_resources():
            if not resource.has_billing_item:
                logger.debug("resource_skipped_no_billing_item", resource_id=resource.id)
                continue
            nodes.append(resource)
        return nodes

    async def list_nodes_by_ids(self, node_ids: Iterable[str | int]) -> list[Resource]:
        wanted = {_parse_node_id(node_id) for node_id in node_ids}
        return [resource for resource in await self.list_nodes() if resource.id in wanted]

    async def list_node_metadata(self) -> list[NodeMetadata]:
        return [resource_to_node(resource) for resource in await self.list_nodes()]

    async def list_hardware_profiles(self) -> list[HardwareProfile]:
        package = await self._catalog.get()
        return hardware.list_hardware_profiles(package, self._kind, self._port_speed)

    async def list_images(self) -> list[ProductItem]:
        return hardware.list_images(await self._catalog.get())

    async def get_image(self, image_id: str) -> ProductItem | None:
        return hardware.find_image(await self._catalog.get(), image_id)

    async def list_locations(self) -> list[Datacenter]:
        package = await self._catalog.get()
        return list(package.datacenters)
