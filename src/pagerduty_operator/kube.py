# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

import base64
from typing import Protocol, runtime_checkable

from kubernetes import client, config
from loguru import logger


@runtime_checkable
class ObjectReader(Protocol):
    """
    Protocol for reading Secret and ConfigMap payloads by namespace and name.
    """

    def read_secret(self, namespace: str, name: str) -> dict[str, bytes]:
        """
        Return the decoded data of a Secret.
        """
        ...

    def read_config_map(self, namespace: str, name: str) -> dict[str, str]:
        """
        Return the data of a ConfigMap.
        """
        ...


def get_core_api(kubeconfig: str | None = None) -> client.CoreV1Api:
    """Get a Kubernetes CoreV1Api client.

    In-cluster configuration is preferred; outside a cluster the given
    kubeconfig (or the default one) is loaded.
    """
    try:
        config.load_incluster_config()
    except config.ConfigException:
        logger.debug("Not running in-cluster, loading kubeconfig")
        config.load_kube_config(config_file=kubeconfig)

    return client.CoreV1Api()


class KubernetesObjectReader:
    """ObjectReader backed by the official Kubernetes client.

    ``ApiException`` (not found, forbidden, ...) is propagated unchanged.
    """

    def __init__(self, api: client.CoreV1Api | None = None, kubeconfig: str | None = None):
        self.api = api or get_core_api(kubeconfig)

    def read_secret(self, namespace: str, name: str) -> dict[str, bytes]:
        secret = self.api.read_namespaced_secret(name=name, namespace=namespace)
        # Secret values arrive base64 encoded
        return {key: base64.b64decode(value) for key, value in (secret.data or {}).items()}

    def read_config_map(self, namespace: str, name: str) -> dict[str, str]:
        config_map = self.api.read_namespaced_config_map(name=name, namespace=namespace)
        return dict(config_map.data or {})
