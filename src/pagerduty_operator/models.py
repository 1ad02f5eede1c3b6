# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""Typed configuration records built from Kubernetes Secrets and ConfigMaps."""

from pydantic import BaseModel, Field

DEFAULT_SERVICE_PREFIX = "osd"
UINT32_MAX = 2**32 - 1


class TicketingConfig(BaseModel):
    """Everything needed to talk to PagerDuty on behalf of one cluster."""

    escalation_policy_id: str = Field(min_length=1)
    auto_resolve_timeout: int = Field(ge=0, le=UINT32_MAX)
    acknowledge_timeout: int = Field(ge=0, le=UINT32_MAX)
    service_prefix: str = DEFAULT_SERVICE_PREFIX
    api_key: str = Field(min_length=1)
    cluster_id: str = Field(min_length=1)
    base_domain: str = Field(min_length=1)

    # Populated from the cluster ConfigMap or by provisioning
    service_id: str | None = None
    integration_id: str | None = None

    @property
    def service_name(self) -> str:
        return f"{self.service_prefix}-{self.cluster_id}.{self.base_domain}-hive-cluster"

    @property
    def service_description(self) -> str:
        return f"{self.cluster_id} - A managed hive created cluster"


class VaultAccess(BaseModel):
    """Connection parameters for reading one property of one Vault secret."""

    namespace: str = Field(min_length=1)
    secret_name: str = Field(min_length=1)
    path: str = Field(min_length=1)
    property_name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    token: str = Field(min_length=1)
    mount: str = Field(min_length=1)
    key: str = Field(min_length=1)

    @property
    def full_path(self) -> str:
        """KV-v2 read path: the payload lives under ``{mount}/data/``."""
        return f"{self.mount}/data/{self.path}"

    @property
    def cache_file_name(self) -> str:
        return f"{self.mount}-{self.property_name}"
