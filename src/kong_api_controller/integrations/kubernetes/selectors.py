"""Label selectors for list and watch requests.

A selector is a conjunction of requirements, each either "label exists" or
"label equals value". Requirements are validated against the Kubernetes
label syntax when they are built, so a bad label name in configuration
fails at startup instead of on the first API call.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from kong_api_controller.integrations.kubernetes.exceptions import LabelSelectorError

_NAME = r"[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?"
_PREFIX = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*"
_KEY_RE = re.compile(rf"^({_PREFIX}/)?{_NAME}$")
_VALUE_RE = re.compile(rf"^({_NAME})?$")

Operator = Literal["exists", "equals"]


def validate_label_key(key: str) -> str:
    """Validate a label key (optional DNS prefix plus name).

    Raises:
        LabelSelectorError: If the key is not a valid label key.
    """
    prefix, _, _ = key.rpartition("/")
    if not key or not _KEY_RE.match(key) or len(prefix) > 253:
        raise LabelSelectorError(f"invalid label key {key!r}", key=key)
    return key


def validate_label_value(key: str, value: str) -> str:
    """Validate a label value (at most 63 chars, alphanumeric at both ends).

    Raises:
        LabelSelectorError: If the value is not a valid label value.
    """
    if len(value) > 63 or not _VALUE_RE.match(value):
        raise LabelSelectorError(f"invalid value {value!r} for label {key!r}", key=key)
    return value


@dataclass(frozen=True)
class Requirement:
    """A single label requirement."""

    key: str
    operator: Operator = "exists"
    value: str | None = None

    def __post_init__(self) -> None:
        validate_label_key(self.key)
        if self.operator == "equals":
            if self.value is None:
                raise LabelSelectorError(
                    f"equality requirement on {self.key!r} needs a value", key=self.key
                )
            validate_label_value(self.key, self.value)
        elif self.value is not None:
            raise LabelSelectorError(
                f"existence requirement on {self.key!r} takes no value", key=self.key
            )

    @classmethod
    def exists(cls, key: str) -> Requirement:
        return cls(key=key, operator="exists")

    @classmethod
    def equals(cls, key: str, value: str) -> Requirement:
        return cls(key=key, operator="equals", value=value)

    def matches(self, labels: Mapping[str, str]) -> bool:
        if self.key not in labels:
            return False
        return self.operator == "exists" or labels[self.key] == self.value

    def __str__(self) -> str:
        if self.operator == "equals":
            return f"{self.key}={self.value}"
        return self.key


@dataclass(frozen=True)
class LabelSelector:
    """A set of requirements combined with logical AND.

    An empty selector matches everything.

    Example:
        >>> selector = LabelSelector.of(
        ...     Requirement.equals("kong.api.service", "auth"),
        ...     Requirement.exists("kong.api"),
        ... )
        >>> str(selector)
        'kong.api.service=auth,kong.api'
    """

    requirements: tuple[Requirement, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, *requirements: Requirement) -> LabelSelector:
        return cls(requirements=tuple(requirements))

    @classmethod
    def everything(cls) -> LabelSelector:
        return cls()

    def add(self, requirement: Requirement) -> LabelSelector:
        """Return a new selector with one more requirement."""
        return LabelSelector(requirements=(*self.requirements, requirement))

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)

    def __bool__(self) -> bool:
        return bool(self.requirements)
