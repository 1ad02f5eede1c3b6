import pytest
from pydantic import ValidationError

from pagerduty_operator.models import TicketingConfig, VaultAccess


def test_ticketing_config_defaults_prefix() -> None:
    config = TicketingConfig(
        escalation_policy_id="P",
        auto_resolve_timeout=0,
        acknowledge_timeout=0,
        api_key="k",
        cluster_id="c",
        base_domain="d",
    )
    assert config.service_prefix == "osd"
    assert config.service_name == "osd-c.d-hive-cluster"


@pytest.mark.parametrize(
    "override",
    [
        {"api_key": ""},
        {"cluster_id": ""},
        {"escalation_policy_id": ""},
        {"auto_resolve_timeout": -1},
        {"acknowledge_timeout": 2**32},
    ],
)
def test_ticketing_config_rejects_invalid(override: dict) -> None:
    fields = {
        "escalation_policy_id": "P",
        "auto_resolve_timeout": 1,
        "acknowledge_timeout": 1,
        "api_key": "k",
        "cluster_id": "c",
        "base_domain": "d",
    }
    fields.update(override)
    with pytest.raises(ValidationError):
        TicketingConfig(**fields)


def test_vault_access_paths(vault_access: VaultAccess) -> None:
    assert vault_access.full_path == "secrets/data/pagerduty/api"
    assert vault_access.cache_file_name == "secrets-api_key"


def test_vault_access_requires_all_fields(vault_access: VaultAccess) -> None:
    fields = vault_access.model_dump()
    fields["token"] = ""
    with pytest.raises(ValidationError):
        VaultAccess(**fields)
