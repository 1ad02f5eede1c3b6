# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

from typing import Any, Protocol, runtime_checkable

import pagerduty

from pagerduty_operator.exceptions import DuplicateNameError

DUPLICATE_NAME_MESSAGE = "Name has already been taken"


@runtime_checkable
class PagerDutyClientProtocol(Protocol):
    """
    The subset of the PagerDuty REST API v2 used to manage cluster services.
    Entities are plain dicts as returned by the API.
    """

    def get_service(self, service_id: str) -> dict[str, Any]: ...

    def get_integration(self, service_id: str, integration_id: str) -> dict[str, Any]: ...

    def get_escalation_policy(self, policy_id: str) -> dict[str, Any]: ...

    def create_service(self, service: dict[str, Any]) -> dict[str, Any]:
        """
        Create a service. Raises DuplicateNameError if the name is taken.
        """
        ...

    def list_services(self, query: str) -> list[dict[str, Any]]: ...

    def create_integration(self, service_id: str, integration: dict[str, Any]) -> dict[str, Any]: ...

    def delete_service(self, service_id: str) -> None: ...


def is_duplicate_name_error(error: Exception) -> bool:
    """Whether a failed create call was rejected for a name collision.

    PagerDuty reports this only as text inside a 400 response, so this is the
    one place that matches on the message.
    """
    if DUPLICATE_NAME_MESSAGE in str(error):
        return True
    response = getattr(error, "response", None)
    body = getattr(response, "text", None)
    return isinstance(body, str) and DUPLICATE_NAME_MESSAGE in body


class PagerDutyRestClient:
    """PagerDutyClientProtocol backed by ``pagerduty.RestApiV2Client``.

    Errors other than a duplicate service name are ``pagerduty.Error``
    subclasses and are propagated unchanged.
    """

    def __init__(self, api_key: str, client: pagerduty.RestApiV2Client | None = None):
        self.client = client or pagerduty.RestApiV2Client(api_key)

    def get_service(self, service_id: str) -> dict[str, Any]:
        service: dict[str, Any] = self.client.rget(f"/services/{service_id}")
        return service

    def get_integration(self, service_id: str, integration_id: str) -> dict[str, Any]:
        integration: dict[str, Any] = self.client.rget(f"/services/{service_id}/integrations/{integration_id}")
        return integration

    def get_escalation_policy(self, policy_id: str) -> dict[str, Any]:
        policy: dict[str, Any] = self.client.rget(f"/escalation_policies/{policy_id}")
        return policy

    def create_service(self, service: dict[str, Any]) -> dict[str, Any]:
        try:
            created: dict[str, Any] = self.client.rpost("/services", json=service)
        except pagerduty.Error as e:
            if is_duplicate_name_error(e):
                raise DuplicateNameError(service["name"]) from e
            raise
        return created

    def list_services(self, query: str) -> list[dict[str, Any]]:
        return list(self.client.iter_all("/services", params={"query": query}))

    def create_integration(self, service_id: str, integration: dict[str, Any]) -> dict[str, Any]:
        created: dict[str, Any] = self.client.rpost(f"/services/{service_id}/integrations", json=integration)
        return created

    def delete_service(self, service_id: str) -> None:
        path = f"/services/{service_id}"
        response = self.client.delete(path)
        if not response.ok:
            raise pagerduty.HttpError(f"DELETE {path}: API responded with status {response.status_code}", response)
