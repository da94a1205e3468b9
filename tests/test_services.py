import re

import pytest

from cwexporter.services import (
    SUPPORTED_SERVICES,
    DimensionsRegexp,
    ServiceConfig,
    get_service,
)


@pytest.mark.parametrize("svc", SUPPORTED_SERVICES, ids=lambda s: s.alias)
def test_supported_service_is_well_formed(svc):
    assert svc.namespace
    assert svc.alias
    assert get_service(svc.namespace) == svc

    if svc.resource_filters is not None:
        assert len(svc.resource_filters) > 0
        assert all(f for f in svc.resource_filters)

    drs = svc.to_model_dimensions_regexp()
    if svc.dimension_regexps is not None:
        assert len(svc.dimension_regexps) > 0
        for regex in svc.dimension_regexps:
            assert regex.pattern
            assert regex.groups > 0
        assert [d.regexp for d in drs] == list(svc.dimension_regexps)
        for dr in drs:
            assert len(dr.dimensions_names) == dr.regexp.groups
    else:
        assert drs == []


def test_aliases_are_unique():
    aliases = [svc.alias for svc in SUPPORTED_SERVICES]
    assert len(aliases) == len(set(aliases))
    for svc in SUPPORTED_SERVICES:
        assert get_service(svc.alias) == svc


def test_get_service_by_alias():
    svc = get_service("sqs")
    assert svc.namespace == "AWS/SQS"
    assert svc.resource_filters == ("sqs",)


def test_get_service_by_namespace():
    svc = get_service("AWS/ApplicationELB")
    assert svc.alias == "alb"


def test_get_service_unknown_returns_none():
    assert get_service("does-not-exist") is None
    assert get_service("") is None


def test_dimensions_regexp_replaces_underscores_with_spaces():
    svc = get_service("kafka")
    drs = svc.to_model_dimensions_regexp()
    assert len(drs) == 1
    assert drs[0].dimensions_names == ("Cluster Name",)


def test_dimensions_regexp_keeps_group_order():
    drs = get_service("dms").to_model_dimensions_regexp()
    assert [d.dimensions_names for d in drs] == [
        ("ReplicationInstanceIdentifier",),
        ("ReplicationTaskIdentifier", "ReplicationInstanceIdentifier"),
    ]


def test_dimensions_regexp_empty_for_service_without_regexps():
    assert get_service("cwagent").to_model_dimensions_regexp() == []


def test_dimensions_regexp_marks_unnamed_groups_with_empty_name():
    svc = ServiceConfig(
        namespace="Custom/NS",
        alias="custom",
        dimension_regexps=(re.compile("(a)/(?P<Some_Dim>[^/]+)"),),
    )
    drs = svc.to_model_dimensions_regexp()
    assert drs == [DimensionsRegexp(regexp=svc.dimension_regexps[0], dimensions_names=("", "Some Dim"))]


def test_alb_regexps_extract_dimensions():
    target_group, load_balancer = get_service("alb").dimension_regexps
    arn = "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/tg-name/abcdef"
    assert target_group.search(arn).group("TargetGroup") == "targetgroup/tg-name/abcdef"
    lb_arn = "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/lb-name/abc"
    assert load_balancer.search(lb_arn).group("LoadBalancer") == "app/lb-name/abc"


def test_sqs_regexp_extracts_queue_name():
    (regex,) = get_service("sqs").dimension_regexps
    assert regex.search("arn:aws:sqs:us-east-1:123456789012:my-queue").group("QueueName") == "my-queue"