from .client import PagerDutyClientProtocol, PagerDutyRestClient, is_duplicate_name_error
from .service import ServiceProvisioner

__all__ = [
    "PagerDutyClientProtocol",
    "PagerDutyRestClient",
    "ServiceProvisioner",
    "is_duplicate_name_error",
]
