from typing import Any
from unittest.mock import MagicMock, patch

import pagerduty
import pytest

from conftest import FakePagerDutyClient
from pagerduty_operator.exceptions import DuplicateNameError
from pagerduty_operator.pagerduty.client import (
    PagerDutyClientProtocol,
    PagerDutyRestClient,
    is_duplicate_name_error,
)


class ResponseError(Exception):
    def __init__(self, message: str, text: str):
        super().__init__(message)
        self.response = MagicMock(text=text)


@pytest.fixture
def rest() -> Any:
    return MagicMock()


def test_default_client_uses_api_key() -> None:
    with patch("pagerduty_operator.pagerduty.client.pagerduty.RestApiV2Client") as mock_cls:
        client = PagerDutyRestClient("pd-api-key")
    mock_cls.assert_called_once_with("pd-api-key")
    assert client.client is mock_cls.return_value


def test_fakes_satisfy_protocol(rest: Any) -> None:
    assert isinstance(PagerDutyRestClient("key", client=rest), PagerDutyClientProtocol)
    assert isinstance(FakePagerDutyClient(), PagerDutyClientProtocol)


def test_is_duplicate_name_error_from_message() -> None:
    assert is_duplicate_name_error(Exception("Invalid Input Provided: Name has already been taken."))
    assert not is_duplicate_name_error(Exception("Invalid Input Provided"))


def test_is_duplicate_name_error_from_response_body() -> None:
    body = '{"error": {"message": "Invalid Input Provided", "errors": ["Name has already been taken."]}}'
    assert is_duplicate_name_error(ResponseError("POST /services: 400", body))
    assert not is_duplicate_name_error(ResponseError("POST /services: 400", '{"error": {}}'))


def test_get_service(rest: Any) -> None:
    rest.rget.return_value = {"id": "PSVC"}
    assert PagerDutyRestClient("key", client=rest).get_service("PSVC") == {"id": "PSVC"}
    rest.rget.assert_called_once_with("/services/PSVC")


def test_get_integration(rest: Any) -> None:
    rest.rget.return_value = {"id": "PINT", "integration_key": "abc"}
    integration = PagerDutyRestClient("key", client=rest).get_integration("PSVC", "PINT")
    assert integration["integration_key"] == "abc"
    rest.rget.assert_called_once_with("/services/PSVC/integrations/PINT")


def test_get_escalation_policy(rest: Any) -> None:
    rest.rget.return_value = {"id": "PPOL"}
    PagerDutyRestClient("key", client=rest).get_escalation_policy("PPOL")
    rest.rget.assert_called_once_with("/escalation_policies/PPOL")


def test_create_service(rest: Any) -> None:
    rest.rpost.return_value = {"id": "PSVC", "name": "svc"}
    created = PagerDutyRestClient("key", client=rest).create_service({"name": "svc"})
    assert created["id"] == "PSVC"
    rest.rpost.assert_called_once_with("/services", json={"name": "svc"})


def test_create_service_duplicate_name(rest: Any) -> None:
    upstream = pagerduty.Error("POST /services: Name has already been taken.")
    rest.rpost.side_effect = upstream

    with pytest.raises(DuplicateNameError) as exc_info:
        PagerDutyRestClient("key", client=rest).create_service({"name": "svc"})

    assert exc_info.value.name == "svc"
    assert exc_info.value.__cause__ is upstream


def test_create_service_other_error_unchanged(rest: Any) -> None:
    upstream = pagerduty.Error("POST /services: 500")
    rest.rpost.side_effect = upstream

    with pytest.raises(pagerduty.Error) as exc_info:
        PagerDutyRestClient("key", client=rest).create_service({"name": "svc"})
    assert exc_info.value is upstream


def test_list_services(rest: Any) -> None:
    rest.iter_all.return_value = iter([{"id": "A"}, {"id": "B"}])
    services = PagerDutyRestClient("key", client=rest).list_services("svc")
    assert services == [{"id": "A"}, {"id": "B"}]
    rest.iter_all.assert_called_once_with("/services", params={"query": "svc"})


def test_create_integration(rest: Any) -> None:
    rest.rpost.return_value = {"id": "PINT"}
    body = {"name": "V4 Alertmanager", "type": "events_api_v2_inbound_integration"}
    PagerDutyRestClient("key", client=rest).create_integration("PSVC", body)
    rest.rpost.assert_called_once_with("/services/PSVC/integrations", json=body)


def test_delete_service(rest: Any) -> None:
    rest.delete.return_value = MagicMock(ok=True, status_code=204)
    PagerDutyRestClient("key", client=rest).delete_service("PSVC")
    rest.delete.assert_called_once_with("/services/PSVC")


def test_delete_service_failure(rest: Any) -> None:
    rest.delete.return_value = MagicMock(ok=False, status_code=404)
    with patch("pagerduty_operator.pagerduty.client.pagerduty.HttpError", side_effect=lambda msg, resp: RuntimeError(msg)):
        with pytest.raises(RuntimeError, match="DELETE /services/PSVC: API responded with status 404"):
            PagerDutyRestClient("key", client=rest).delete_service("PSVC")
