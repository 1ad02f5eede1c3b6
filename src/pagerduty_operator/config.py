# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

import tempfile
from datetime import timedelta
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from pagerduty_operator.models import DEFAULT_SERVICE_PREFIX


class OperatorSettings(BaseSettings):
    """
    Process-level settings for the PagerDuty and Vault helpers.
    """

    # Where the shared PagerDuty API key Secret lives
    operator_namespace: str = "pagerduty-operator"
    api_key_secret_name: str = "pagerduty-api-key"
    cluster_config_suffix: str = "-pd-config"
    default_service_prefix: str = DEFAULT_SERVICE_PREFIX

    # Vault secret cache
    cache_dir: Path = Path(tempfile.gettempdir())
    cache_staleness_hours: float = 6.0

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Kubernetes. In-cluster config is tried first, then this kubeconfig.
    kubeconfig: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="PAGERDUTY_OPERATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cache_staleness(self) -> timedelta:
        return timedelta(hours=self.cache_staleness_hours)
