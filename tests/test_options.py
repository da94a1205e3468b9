import pytest

from cwexporter.feature_flags import ALWAYS_RETURN_INFO_METRICS, AWS_SDK_V2
from cwexporter.options import (
    DEFAULT_CLOUDWATCH_CONCURRENCY,
    Options,
    build_options,
    cloudwatch_api_concurrency,
    cloudwatch_per_api_limit_concurrency,
    enable_feature_flag,
    labels_snake_case,
    metrics_per_query,
    tagging_api_concurrency,
)


def test_defaults():
    options = build_options()
    assert options.metrics_per_query == 500
    assert options.tagging_api_concurrency == 5
    assert options.labels_snake_case is False
    assert options.cloudwatch_concurrency == DEFAULT_CLOUDWATCH_CONCURRENCY
    assert options.cloudwatch_concurrency.per_api_limit_enabled is False
    assert not options.feature_flags.is_feature_enabled(AWS_SDK_V2)


def test_values_are_applied():
    options = build_options(
        metrics_per_query(100),
        labels_snake_case(True),
        tagging_api_concurrency(7),
        cloudwatch_api_concurrency(9),
    )
    assert options.metrics_per_query == 100
    assert options.labels_snake_case is True
    assert options.tagging_api_concurrency == 7
    assert options.cloudwatch_concurrency.single_limit == 9
    assert options.cloudwatch_concurrency.per_api_limit_enabled is False


def test_per_api_limits_enable_and_set():
    options = build_options(cloudwatch_per_api_limit_concurrency(2, 3, 4))
    concurrency = options.cloudwatch_concurrency
    assert concurrency.per_api_limit_enabled is True
    assert (concurrency.list_metrics, concurrency.get_metric_data) == (2, 3)
    assert concurrency.get_metric_statistics == 4
    assert concurrency.single_limit == DEFAULT_CLOUDWATCH_CONCURRENCY.single_limit


def test_later_option_wins():
    options = build_options(metrics_per_query(10), metrics_per_query(20))
    assert options.metrics_per_query == 20


def test_feature_flags_accumulate():
    options = build_options(
        enable_feature_flag(AWS_SDK_V2), enable_feature_flag(ALWAYS_RETURN_INFO_METRICS)
    )
    assert options.feature_flags.is_feature_enabled(AWS_SDK_V2)
    assert options.feature_flags.is_feature_enabled(ALWAYS_RETURN_INFO_METRICS)
    assert not options.feature_flags.is_feature_enabled("other-flag")


def test_options_are_not_mutated():
    base = Options()
    updated = metrics_per_query(42)(base)
    assert base.metrics_per_query == 500
    assert updated.metrics_per_query == 42


@pytest.mark.parametrize(
    ("option", "message"),
    [
        (lambda: metrics_per_query(0), "MetricsPerQuery must be a positive value"),
        (lambda: cloudwatch_api_concurrency(-1), "CloudWatchAPIConcurrency must be a positive value"),
        (lambda: tagging_api_concurrency(0), "TaggingAPIConcurrency must be a positive value"),
        (
            lambda: cloudwatch_per_api_limit_concurrency(0, 1, 1),
            "ListMetrics concurrency limit must be a positive value",
        ),
        (
            lambda: cloudwatch_per_api_limit_concurrency(1, 0, 1),
            "GetMetricData concurrency limit must be a positive value",
        ),
        (
            lambda: cloudwatch_per_api_limit_concurrency(1, 1, 0),
            "GetMetricStatistics concurrency limit must be a positive value",
        ),
    ],
)
def test_non_positive_values_are_rejected(option, message):
    with pytest.raises(ValueError) as excinfo:
        build_options(option())
    assert str(excinfo.value) == message