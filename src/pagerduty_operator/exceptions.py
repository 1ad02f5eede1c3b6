# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/pagerduty_operator

"""Exception hierarchy for the PagerDuty and Vault helpers.

Errors raised by the upstream clients (PagerDuty, Vault, Kubernetes) are not
wrapped here; they propagate to the caller unchanged.
"""


class OperatorError(Exception):
    """Base class for errors raised by pagerduty_operator."""


class ConfigKeyError(OperatorError):
    """A required configuration key could not be resolved."""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class MissingKeyError(ConfigKeyError):
    def __init__(self, key: str):
        super().__init__(key, f"{key} does not exist")


class EmptyValueError(ConfigKeyError):
    def __init__(self, key: str):
        super().__init__(key, f"{key} is empty")


class InvalidNumberError(ConfigKeyError):
    def __init__(self, key: str, value: str):
        super().__init__(key, f"{key} is not a valid unsigned 32-bit integer: {value!r}")
        self.value = value


class InvalidEncodingError(ConfigKeyError):
    def __init__(self, key: str):
        super().__init__(key, f"{key} is not valid UTF-8")


class PolicyNotFoundError(OperatorError):
    def __init__(self, policy_id: str):
        super().__init__(f"Escalation policy {policy_id} not found in PagerDuty")
        self.policy_id = policy_id


class DuplicateNameError(OperatorError):
    """PagerDuty rejected a create call because the name is already taken."""

    def __init__(self, name: str):
        super().__init__(f"Name has already been taken: {name}")
        self.name = name


class MalformedSecretPayloadError(OperatorError):
    """Vault returned a payload without a usable KV-v2 ``data`` mapping."""


class PropertyNotFoundError(OperatorError):
    def __init__(self, prop: str):
        super().__init__(f"{prop} not set in vault")
        self.property = prop


class EmptyPropertyError(OperatorError):
    def __init__(self, prop: str):
        super().__init__(f"{prop} is empty")
        self.property = prop
