# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""Read-through file cache for secrets stored in a Vault KV-v2 mount."""

import json
import tempfile
import time
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from pagerduty_operator.exceptions import (
    EmptyPropertyError,
    MalformedSecretPayloadError,
    PropertyNotFoundError,
)
from pagerduty_operator.models import VaultAccess
from pagerduty_operator.utils.locks import KeyedLock
from pagerduty_operator.vault.client import HvacVaultClient, VaultClientProtocol

if TYPE_CHECKING:
    from loguru import Logger

STALENESS_WINDOW = timedelta(hours=6)


def _stringify(raw: Any) -> str:
    """Render a KV value as text; non-strings use their JSON form (true, 42, {...})."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return json.dumps(raw)


class SecretCache:
    """Serves Vault secret properties from plain-text files in a shared directory.

    A cached value is considered fresh for ``staleness`` after the file was last
    written. Files hold the bare value with no metadata, one file per
    ``(mount, property)`` pair.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        staleness: timedelta = STALENESS_WINDOW,
        client_factory: Callable[[str, str], VaultClientProtocol] = HvacVaultClient,
        log: "Logger | None" = None,
        locks: KeyedLock | None = None,
    ):
        """Initializes the SecretCache.

        Args:
            cache_dir: Directory holding cache files. Defaults to the system temp dir.
            staleness: How long a cache file is served before Vault is queried again.
            client_factory: Builds an authenticated Vault client from a URL and a token.
            log: Logger to report through. Defaults to a bound loguru logger.
            locks: Per-path locks, shared by every cache in the process that
                uses the same directory. Defaults to a private set.
        """
        self.cache_dir = cache_dir or Path(tempfile.gettempdir())
        self.staleness = staleness
        self.client_factory = client_factory
        self.log = log or logger.bind(component="vault")
        self._path_locks = locks if locks is not None else KeyedLock()

    def cache_path(self, access: VaultAccess) -> Path:
        # Separators in the mount or property are flattened so the file always
        # sits directly in cache_dir
        name = access.cache_file_name.replace("/", "_").replace("\\", "_")
        return self.cache_dir / name

    def is_fresh(self, path: Path) -> bool:
        try:
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return modified >= time.time() - self.staleness.total_seconds()

    def query_vault(self, access: VaultAccess) -> str:
        """Read ``access.property_name`` from Vault, bypassing the cache.

        Raises:
            MalformedSecretPayloadError: If the response has no usable ``data`` mapping.
            PropertyNotFoundError: If the property is absent from the secret.
            EmptyPropertyError: If the property's value is empty.
        """
        client = self.client_factory(access.url, access.token)
        response = client.read(access.full_path)
        if response is None:
            raise MalformedSecretPayloadError(f"No secret found at {access.full_path}")

        payload = response.get("data")
        if not isinstance(payload, dict):
            raise MalformedSecretPayloadError("Error parsing secret data")

        # Newest warning first
        for warning in reversed(response.get("warnings") or []):
            self.log.info(warning)

        secret = payload.get("data")
        if not isinstance(secret, dict):
            raise MalformedSecretPayloadError("Error parsing secret data")
        if not secret:
            raise MalformedSecretPayloadError("Vault data is empty")

        for name, raw in secret.items():
            if name == access.property_name:
                value = _stringify(raw)
                if not value:
                    raise EmptyPropertyError(access.property_name)
                return value

        raise PropertyNotFoundError(access.property_name)

    def _save(self, path: Path, value: str) -> bool:
        try:
            path.unlink(missing_ok=True)
            path.write_text(value)
        except OSError as e:
            self.log.error(f"Failed to save secret to {path}: {e}")
            return False
        return True

    def get(self, access: VaultAccess) -> str:
        """Return the secret value, from the cache file while it is fresh.

        On a miss or a stale file, Vault is queried and the file rewritten. If
        the file cannot be written the fetched value is returned directly. If it
        cannot be read back it is removed and Vault is queried once more.
        """
        path = self.cache_path(access)

        with self._path_locks.hold(str(path)):
            if not self.is_fresh(path):
                secret = self.query_vault(access)
                if not self._save(path, secret):
                    return secret

            try:
                return path.read_text()
            except OSError as e:
                self.log.error(f"Failed to read {path} - removing: {e}")
                try:
                    path.unlink(missing_ok=True)
                except OSError as unlink_error:
                    self.log.warning(f"Failed to remove {path}: {unlink_error}")
                return self.query_vault(access)
