# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from loguru import logger

from pagerduty_operator.exceptions import DuplicateNameError, PolicyNotFoundError
from pagerduty_operator.models import TicketingConfig
from pagerduty_operator.pagerduty.client import PagerDutyClientProtocol, PagerDutyRestClient
from pagerduty_operator.utils.locks import KeyedLock

if TYPE_CHECKING:
    from loguru import Logger

INTEGRATION_NAME = "V4 Alertmanager"
INTEGRATION_TYPE = "events_api_v2_inbound_integration"
ALERT_CREATION = "create_alerts_and_incidents"


class ServiceProvisioner:
    """Creates, adopts, looks up and deletes the PagerDuty service of a cluster.

    A PagerDuty client is built per call from the API key held in the
    TicketingConfig, so one provisioner can serve any number of clusters.
    """

    def __init__(
        self,
        client_factory: Callable[[str], PagerDutyClientProtocol] = PagerDutyRestClient,
        log: "Logger | None" = None,
        locks: KeyedLock | None = None,
    ):
        """Initializes the ServiceProvisioner.

        Args:
            client_factory: Builds a PagerDuty client from an API key.
            log: Logger to report through. Defaults to a bound loguru logger.
            locks: Per-cluster locks shared across provisioners. Defaults to a private set.
        """
        self.client_factory = client_factory
        self.log = log or logger.bind(component="pagerduty")
        self._cluster_locks = locks if locks is not None else KeyedLock()

    def _client(self, ticketing: TicketingConfig) -> PagerDutyClientProtocol:
        return self.client_factory(ticketing.api_key)

    @staticmethod
    def _require_service_id(ticketing: TicketingConfig) -> str:
        if not ticketing.service_id:
            raise ValueError("Service ID is required")
        return ticketing.service_id

    def get_service(self, ticketing: TicketingConfig) -> dict[str, Any]:
        """Fetch the cluster's service by its stored ID."""
        return self._client(ticketing).get_service(self._require_service_id(ticketing))

    def get_integration_key(self, ticketing: TicketingConfig) -> str:
        """Return the routing key of the cluster's stored integration."""
        service_id = self._require_service_id(ticketing)
        if not ticketing.integration_id:
            raise ValueError("Integration ID is required")

        integration = self._client(ticketing).get_integration(service_id, ticketing.integration_id)
        key: str = integration["integration_key"]
        return key

    def provision(self, ticketing: TicketingConfig) -> str:
        """Ensure a service and an alerting integration exist for the cluster.

        The service is created, or adopted when PagerDuty reports that a service
        with the same name already exists. An integration is only created when
        the service does not already carry one, so provisioning can be retried.
        The resulting IDs are stored on ``ticketing``.

        Args:
            ticketing: The resolved PagerDuty configuration for the cluster.

        Returns:
            str: The integration ID.

        Raises:
            PolicyNotFoundError: If the escalation policy cannot be fetched.
            DuplicateNameError: If the name is taken but no exact match is listed.
        """
        with self._cluster_locks.hold(ticketing.cluster_id):
            client = self._client(ticketing)

            try:
                policy = client.get_escalation_policy(ticketing.escalation_policy_id)
            except Exception as e:
                self.log.error(f"Failed to fetch escalation policy {ticketing.escalation_policy_id}: {e}")
                raise PolicyNotFoundError(ticketing.escalation_policy_id) from e

            descriptor = {
                "name": ticketing.service_name,
                "description": ticketing.service_description,
                "escalation_policy": {"id": policy["id"], "type": "escalation_policy_reference"},
                "auto_resolve_timeout": ticketing.auto_resolve_timeout,
                "acknowledgement_timeout": ticketing.acknowledge_timeout,
                "alert_creation": ALERT_CREATION,
            }

            adopted = False
            try:
                service = client.create_service(descriptor)
                self.log.info(f"Created PagerDuty service {service['id']} ({ticketing.service_name})")
            except DuplicateNameError as e:
                service = self._find_existing_service(client, ticketing.service_name, e)
                adopted = True
                self.log.info(f"Adopted existing PagerDuty service {service['id']} ({ticketing.service_name})")

            ticketing.service_id = service["id"]

            integration_id = self._existing_integration_id(service) if adopted else None
            if integration_id:
                self.log.info(f"Reusing integration {integration_id} on service {service['id']}")
            else:
                integration = client.create_integration(
                    service["id"], {"name": INTEGRATION_NAME, "type": INTEGRATION_TYPE}
                )
                integration_id = integration["id"]

            ticketing.integration_id = integration_id
            return integration_id

    def _find_existing_service(
        self, client: PagerDutyClientProtocol, name: str, duplicate: DuplicateNameError
    ) -> dict[str, Any]:
        """Find the service whose name collided. Re-raises ``duplicate`` if none."""
        try:
            candidates = client.list_services(name)
        except Exception as e:
            self.log.warning(f"Failed to list services named {name}: {e}")
            raise duplicate from e

        # The query is a substring search, so only an exact name is adopted
        for candidate in candidates:
            if candidate.get("name") == name:
                return candidate

        raise duplicate

    @staticmethod
    def _existing_integration_id(service: dict[str, Any]) -> str | None:
        # Services embed integration references: {"id", "type": "..._reference", "summary": name}
        for ref in service.get("integrations") or []:
            if ref.get("type") not in (INTEGRATION_TYPE, f"{INTEGRATION_TYPE}_reference"):
                continue
            if ref.get("summary", ref.get("name")) == INTEGRATION_NAME:
                integration_id: str = ref["id"]
                return integration_id
        return None

    def deprovision(self, ticketing: TicketingConfig) -> None:
        """Delete the cluster's service."""
        service_id = self._require_service_id(ticketing)
        self._client(ticketing).delete_service(service_id)
        self.log.info(f"Deleted PagerDuty service {service_id}")
