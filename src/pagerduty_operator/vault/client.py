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

import hvac


@runtime_checkable
class VaultClientProtocol(Protocol):
    """
    Protocol for an authenticated Vault client to allow dependency injection and testing.
    """

    def read(self, path: str) -> dict[str, Any] | None:
        """
        Read a raw path. Returns the response body, or None if nothing is stored there.
        """
        ...


class HvacVaultClient:
    """
    Token-authenticated Vault client built on hvac.
    Transport and permission errors from hvac are propagated unchanged.
    """

    def __init__(self, url: str, token: str, client: hvac.Client | None = None):
        self.client = client or hvac.Client(url=url, token=token)

    def read(self, path: str) -> dict[str, Any] | None:
        response: dict[str, Any] | None = self.client.read(path)
        return response
