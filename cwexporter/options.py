"""Options controlling how a scrape runs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from functools import reduce

from cwexporter.feature_flags import FeatureFlagSet

DEFAULT_METRICS_PER_QUERY = 500
DEFAULT_LABELS_SNAKE_CASE = False
DEFAULT_TAGGING_API_CONCURRENCY = 5


@dataclass(frozen=True)
class ConcurrencyConfig:
    """Limits on concurrent CloudWatch API calls.

    With ``per_api_limit_enabled`` each API has its own limit, otherwise
    ``single_limit`` is shared by all of them.
    """

    single_limit: int = 5
    per_api_limit_enabled: bool = False
    list_metrics: int = 5
    get_metric_data: int = 5
    get_metric_statistics: int = 5


DEFAULT_CLOUDWATCH_CONCURRENCY = ConcurrencyConfig()


@dataclass(frozen=True)
class Options:
    """Settings for one scrape."""

    metrics_per_query: int = DEFAULT_METRICS_PER_QUERY
    labels_snake_case: bool = DEFAULT_LABELS_SNAKE_CASE
    tagging_api_concurrency: int = DEFAULT_TAGGING_API_CONCURRENCY
    feature_flags: FeatureFlagSet = field(default_factory=FeatureFlagSet)
    cloudwatch_concurrency: ConcurrencyConfig = DEFAULT_CLOUDWATCH_CONCURRENCY


Option = Callable[[Options], Options]


def _require_positive(value: int, what: str) -> None:
    if value <= 0:
        raise ValueError(f"{what} must be a positive value")


def metrics_per_query(value: int) -> Option:
    """Set how many metrics go into one GetMetricData query."""

    def apply(options: Options) -> Options:
        _require_positive(value, "MetricsPerQuery")
        return replace(options, metrics_per_query=value)

    return apply


def labels_snake_case(value: bool) -> Option:
    """Choose whether label names are converted to snake case."""

    def apply(options: Options) -> Options:
        return replace(options, labels_snake_case=value)

    return apply


def cloudwatch_api_concurrency(max_concurrency: int) -> Option:
    """Set the shared limit on concurrent CloudWatch API calls."""

    def apply(options: Options) -> Options:
        _require_positive(max_concurrency, "CloudWatchAPIConcurrency")
        concurrency = replace(options.cloudwatch_concurrency, single_limit=max_concurrency)
        return replace(options, cloudwatch_concurrency=concurrency)

    return apply


def cloudwatch_per_api_limit_concurrency(
    list_metrics: int, get_metric_data: int, get_metric_statistics: int
) -> Option:
    """Enable separate concurrency limits for each CloudWatch API."""

    def apply(options: Options) -> Options:
        _require_positive(list_metrics, "ListMetrics concurrency limit")
        _require_positive(get_metric_data, "GetMetricData concurrency limit")
        _require_positive(get_metric_statistics, "GetMetricStatistics concurrency limit")
        concurrency = replace(
            options.cloudwatch_concurrency,
            per_api_limit_enabled=True,
            list_metrics=list_metrics,
            get_metric_data=get_metric_data,
            get_metric_statistics=get_metric_statistics,
        )
        return replace(options, cloudwatch_concurrency=concurrency)

    return apply


def tagging_api_concurrency(max_concurrency: int) -> Option:
    """Set the limit on concurrent tagging API calls."""

    def apply(options: Options) -> Options:
        _require_positive(max_concurrency, "TaggingAPIConcurrency")
        return replace(options, tagging_api_concurrency=max_concurrency)

    return apply


def enable_feature_flag(*flags: str) -> Option:
    """Enable the named feature flags."""

    def apply(options: Options) -> Options:
        return replace(options, feature_flags=FeatureFlagSet(options.feature_flags.union(flags)))

    return apply


def build_options(*options: Option) -> Options:
    """Apply the options in order to the defaults; raises ValueError on a bad value."""
    return reduce(lambda current, option: option(current), options, Options())