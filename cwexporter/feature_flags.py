"""Feature flags and a context-local way of passing them down the call chain."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Protocol, runtime_checkable

AWS_SDK_V2 = "aws-sdk-v2"
"""Use the newer SDK client implementation."""

ALWAYS_RETURN_INFO_METRICS = "always-return-info-metrics"
"""Return info metrics even when there are no matching CloudWatch metrics."""


@runtime_checkable
class FeatureFlags(Protocol):
    """Anything that can tell whether a feature flag is enabled."""

    def is_feature_enabled(self, flag: str) -> bool: ...


class NoFeatureFlags:
    """Feature flags with every flag disabled."""

    def is_feature_enabled(self, flag: str) -> bool:
        return False

    def __repr__(self) -> str:
        return "NoFeatureFlags()"


class FeatureFlagSet(frozenset):
    """An immutable set of enabled feature flag names."""

    def is_feature_enabled(self, flag: str) -> bool:
        return flag in self


_DEFAULT_FLAGS = NoFeatureFlags()
_current: ContextVar[FeatureFlags] = ContextVar("feature_flags", default=_DEFAULT_FLAGS)


@contextmanager
def flags_in_context(flags: FeatureFlags) -> Iterator[FeatureFlags]:
    """Make ``flags`` the current feature flags for the duration of the block."""
    token = _current.set(flags)
    try:
        yield flags
    finally:
        _current.reset(token)


def current_flags() -> FeatureFlags:
    """Return the feature flags in effect, with all disabled if none were set."""
    return _current.get()