from .cache import STALENESS_WINDOW, SecretCache
from .client import HvacVaultClient, VaultClientProtocol

__all__ = [
    "STALENESS_WINDOW",
    "SecretCache",
    "HvacVaultClient",
    "VaultClientProtocol",
]
