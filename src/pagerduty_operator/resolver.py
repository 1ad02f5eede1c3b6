# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""Resolve typed configuration records from Secrets and ConfigMaps."""

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

from loguru import logger

from pagerduty_operator.config import OperatorSettings
from pagerduty_operator.exceptions import (
    ConfigKeyError,
    EmptyValueError,
    InvalidEncodingError,
    InvalidNumberError,
    MissingKeyError,
)
from pagerduty_operator.kube import ObjectReader
from pagerduty_operator.models import UINT32_MAX, TicketingConfig, VaultAccess

if TYPE_CHECKING:
    from loguru import Logger

_UINT_RE = re.compile(r"[0-9]+")


def get_config_map_key(data: Mapping[str, str], key: str) -> str:
    """Return a non-empty ConfigMap value.

    Raises:
        MissingKeyError: If ``key`` is not present.
        EmptyValueError: If the value is empty.
    """
    if key not in data:
        raise MissingKeyError(key)
    value = data[key]
    if not value:
        raise EmptyValueError(key)
    return value


def get_secret_key(data: Mapping[str, bytes], key: str) -> str:
    """Return a non-empty Secret value decoded as UTF-8.

    Raises:
        MissingKeyError: If ``key`` is not present.
        InvalidEncodingError: If the value is not valid UTF-8.
        EmptyValueError: If the value is empty.
    """
    if key not in data:
        raise MissingKeyError(key)
    try:
        value = data[key].decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(key) from e
    if not value:
        raise EmptyValueError(key)
    return value


def parse_uint(key: str, value: str) -> int:
    """Parse a base-10 unsigned integer that fits in 32 bits."""
    if not _UINT_RE.fullmatch(value):
        raise InvalidNumberError(key, value)
    parsed = int(value)
    if parsed > UINT32_MAX:
        raise InvalidNumberError(key, value)
    return parsed


class ConfigResolver:
    """Builds TicketingConfig and VaultAccess records from cluster objects."""

    def __init__(
        self,
        reader: ObjectReader,
        settings: OperatorSettings | None = None,
        log: "Logger | None" = None,
    ):
        self.reader = reader
        self.settings = settings or OperatorSettings()
        self.log = log or logger.bind(component="resolver")

    def resolve_pagerduty_config(self, cluster_id: str, base_domain: str) -> TicketingConfig:
        """Read the shared PagerDuty Secret and build a TicketingConfig.

        ``SERVICE_PREFIX`` is optional: any failure resolving it falls back to
        the default prefix instead of being raised.
        """
        data = self.reader.read_secret(self.settings.operator_namespace, self.settings.api_key_secret_name)

        api_key = get_secret_key(data, "PAGERDUTY_API_KEY")
        escalation_policy_id = get_secret_key(data, "ESCALATION_POLICY")
        auto_resolve_timeout = parse_uint("RESOLVE_TIMEOUT", get_secret_key(data, "RESOLVE_TIMEOUT"))
        acknowledge_timeout = parse_uint("ACKNOWLEDGE_TIMEOUT", get_secret_key(data, "ACKNOWLEDGE_TIMEOUT"))

        try:
            service_prefix = get_secret_key(data, "SERVICE_PREFIX")
        except ConfigKeyError as e:
            self.log.debug(f"{e}, using default service prefix {self.settings.default_service_prefix!r}")
            service_prefix = self.settings.default_service_prefix

        return TicketingConfig(
            escalation_policy_id=escalation_policy_id,
            auto_resolve_timeout=auto_resolve_timeout,
            acknowledge_timeout=acknowledge_timeout,
            service_prefix=service_prefix,
            api_key=api_key,
            cluster_id=cluster_id,
            base_domain=base_domain,
        )

    def resolve_cluster_config(self, ticketing: TicketingConfig, namespace: str, cluster_name: str) -> TicketingConfig:
        """Load the stored service and integration IDs for a cluster.

        Reads the ``{cluster_name}-pd-config`` ConfigMap and stores the IDs on
        ``ticketing``, which is also returned.
        """
        name = f"{cluster_name}{self.settings.cluster_config_suffix}"
        data = self.reader.read_config_map(namespace, name)

        ticketing.service_id = get_config_map_key(data, "SERVICE_ID")
        ticketing.integration_id = get_config_map_key(data, "INTEGRATION_ID")
        return ticketing

    def resolve_vault_access(self, namespace: str, secret_name: str) -> VaultAccess:
        """Read Vault connection parameters from the named Secret."""
        data = self.reader.read_secret(namespace, secret_name)

        url = get_secret_key(data, "VAULT_URL")
        token = get_secret_key(data, "VAULT_TOKEN")
        mount = get_secret_key(data, "VAULT_MOUNT")
        key = get_secret_key(data, "VAULT_KEY")
        property_name = get_secret_key(data, "VAULT_PROPERTY")
        path = get_secret_key(data, "VAULT_PATH")

        return VaultAccess(
            namespace=namespace,
            secret_name=secret_name,
            path=path,
            property_name=property_name,
            url=url,
            token=token,
            mount=mount,
            key=key,
        )
