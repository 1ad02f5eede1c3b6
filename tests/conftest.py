from typing import Any
from unittest.mock import MagicMock

import pytest

from pagerduty_operator.exceptions import DuplicateNameError
from pagerduty_operator.models import TicketingConfig, VaultAccess


class FakeObjectReader:
    def __init__(
        self,
        secrets: dict[tuple[str, str], dict[str, bytes]] | None = None,
        config_maps: dict[tuple[str, str], dict[str, str]] | None = None,
    ):
        self.secrets = secrets or {}
        self.config_maps = config_maps or {}

    def read_secret(self, namespace: str, name: str) -> dict[str, bytes]:
        if (namespace, name) not in self.secrets:
            raise LookupError(f"secret {namespace}/{name} not found")
        return self.secrets[(namespace, name)]

    def read_config_map(self, namespace: str, name: str) -> dict[str, str]:
        if (namespace, name) not in self.config_maps:
            raise LookupError(f"configmap {namespace}/{name} not found")
        return self.config_maps[(namespace, name)]


class FakePagerDutyClient:
    """In-memory PagerDuty with call recording."""

    def __init__(self) -> None:
        self.policies: dict[str, dict[str, Any]] = {"PPOLICY": {"id": "PPOLICY", "type": "escalation_policy"}}
        self.services: dict[str, dict[str, Any]] = {}
        self.integrations: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[str] = []
        self.create_service_error: Exception | None = None
        self.list_services_error: Exception | None = None
        self.create_integration_error: Exception | None = None
        self._next_id = 0

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}{self._next_id}"

    def get_service(self, service_id: str) -> dict[str, Any]:
        self.calls.append("get_service")
        if service_id not in self.services:
            raise LookupError(f"service {service_id} not found")
        return self.services[service_id]

    def get_integration(self, service_id: str, integration_id: str) -> dict[str, Any]:
        self.calls.append("get_integration")
        if (service_id, integration_id) not in self.integrations:
            raise LookupError(f"integration {integration_id} not found")
        return self.integrations[(service_id, integration_id)]

    def get_escalation_policy(self, policy_id: str) -> dict[str, Any]:
        self.calls.append("get_escalation_policy")
        if policy_id not in self.policies:
            raise LookupError(f"escalation policy {policy_id} not found")
        return self.policies[policy_id]

    def create_service(self, service: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("create_service")
        if self.create_service_error is not None:
            raise self.create_service_error
        if any(s["name"] == service["name"] for s in self.services.values()):
            raise DuplicateNameError(service["name"])
        created = dict(service, id=self._new_id("PSVC"), integrations=[])
        self.services[created["id"]] = created
        return created

    def list_services(self, query: str) -> list[dict[str, Any]]:
        self.calls.append("list_services")
        if self.list_services_error is not None:
            raise self.list_services_error
        return [s for s in self.services.values() if query in s["name"]]

    def create_integration(self, service_id: str, integration: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("create_integration")
        if self.create_integration_error is not None:
            raise self.create_integration_error
        created = dict(integration, id=self._new_id("PINT"), integration_key=f"key-{self._next_id}")
        self.integrations[(service_id, created["id"])] = created
        self.services[service_id]["integrations"].append(
            {"id": created["id"], "type": f"{integration['type']}_reference", "summary": integration["name"]}
        )
        return created

    def delete_service(self, service_id: str) -> None:
        self.calls.append("delete_service")
        if service_id not in self.services:
            raise LookupError(f"service {service_id} not found")
        del self.services[service_id]


class FakeVaultClient:
    def __init__(self, responses: dict[str, dict[str, Any] | None]):
        self.responses = responses
        self.reads: list[str] = []

    def read(self, path: str) -> dict[str, Any] | None:
        self.reads.append(path)
        return self.responses.get(path)


@pytest.fixture
def fake_pd() -> FakePagerDutyClient:
    return FakePagerDutyClient()


@pytest.fixture
def ticketing() -> TicketingConfig:
    return TicketingConfig(
        escalation_policy_id="PPOLICY",
        auto_resolve_timeout=300,
        acknowledge_timeout=600,
        api_key="pd-api-key",
        cluster_id="abc123",
        base_domain="example.com",
    )


@pytest.fixture
def vault_access() -> VaultAccess:
    return VaultAccess(
        namespace="pagerduty-operator",
        secret_name="vault-config",
        path="pagerduty/api",
        property_name="api_key",
        url="https://vault.example.com",
        token="s.token",
        mount="secrets",
        key="pagerduty",
    )


@pytest.fixture
def mock_log() -> MagicMock:
    return MagicMock()
