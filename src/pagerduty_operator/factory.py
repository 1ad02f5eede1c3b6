from functools import lru_cache

from pagerduty_operator.config import OperatorSettings
from pagerduty_operator.kube import KubernetesObjectReader, ObjectReader
from pagerduty_operator.pagerduty.service import ServiceProvisioner
from pagerduty_operator.resolver import ConfigResolver
from pagerduty_operator.utils.locks import KeyedLock
from pagerduty_operator.utils.logger import get_logger
from pagerduty_operator.vault.cache import SecretCache

# Shared by every helper built here so concurrent callers in one process
# contend on the same cluster id or cache file
CLUSTER_LOCKS = KeyedLock()
CACHE_LOCKS = KeyedLock()


@lru_cache(maxsize=None)
def _kubernetes_reader(kubeconfig: str | None) -> KubernetesObjectReader:
    return KubernetesObjectReader(kubeconfig=kubeconfig)


class OperatorFactory:
    """
    Factory to create the PagerDuty and Vault helpers from settings.
    """

    @staticmethod
    def get_object_reader(settings: OperatorSettings) -> ObjectReader:
        """
        Returns the process-wide Kubernetes reader for the configured kubeconfig.
        """
        return _kubernetes_reader(settings.kubeconfig)

    @staticmethod
    def get_resolver(settings: OperatorSettings, reader: ObjectReader | None = None) -> ConfigResolver:
        """
        Returns a ConfigResolver reading from the cluster.
        """
        return ConfigResolver(
            reader=reader or OperatorFactory.get_object_reader(settings),
            settings=settings,
            log=get_logger("resolver"),
        )

    @staticmethod
    def get_service_provisioner(settings: OperatorSettings) -> ServiceProvisioner:
        return ServiceProvisioner(log=get_logger("pagerduty"), locks=CLUSTER_LOCKS)

    @staticmethod
    def get_secret_cache(settings: OperatorSettings) -> SecretCache:
        return SecretCache(
            cache_dir=settings.cache_dir,
            staleness=settings.cache_staleness,
            log=get_logger("vault"),
            locks=CACHE_LOCKS,
        )


def get_vault_secret(
    namespace: str,
    secret_name: str,
    settings: OperatorSettings | None = None,
    reader: ObjectReader | None = None,
) -> str:
    """
    Resolve Vault credentials from a Secret and read the configured property through the cache.
    """
    settings = settings or OperatorSettings()
    access = OperatorFactory.get_resolver(settings, reader).resolve_vault_access(namespace, secret_name)
    return OperatorFactory.get_secret_cache(settings).get(access)
