# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""
pagerduty-operator
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import OperatorSettings
from .models import TicketingConfig, VaultAccess
from .pagerduty.service import ServiceProvisioner
from .resolver import ConfigResolver
from .vault.cache import SecretCache

__all__ = [
    "OperatorSettings",
    "TicketingConfig",
    "VaultAccess",
    "ConfigResolver",
    "ServiceProvisioner",
    "SecretCache",
]
