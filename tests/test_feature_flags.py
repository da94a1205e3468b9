from cwexporter.feature_flags import (
    ALWAYS_RETURN_INFO_METRICS,
    AWS_SDK_V2,
    FeatureFlagSet,
    NoFeatureFlags,
    current_flags,
    flags_in_context,
)


class _AllEnabled:
    def is_feature_enabled(self, flag):
        return True


def test_defaults_to_non_enabled():
    flags = current_flags()
    assert flags.is_feature_enabled("some-feature") is False
    assert flags.is_feature_enabled("some-other-feature") is False


def test_retrieves_flags_from_context():
    with flags_in_context(_AllEnabled()):
        assert current_flags().is_feature_enabled("some-feature") is True
        assert current_flags().is_feature_enabled("some-other-feature") is True


def test_context_is_restored_after_block():
    with flags_in_context(_AllEnabled()):
        pass
    assert current_flags().is_feature_enabled("some-feature") is False


def test_nested_contexts_restore_outer_flags():
    outer = FeatureFlagSet({AWS_SDK_V2})
    inner = FeatureFlagSet({ALWAYS_RETURN_INFO_METRICS})
    with flags_in_context(outer):
        with flags_in_context(inner):
            assert current_flags().is_feature_enabled(ALWAYS_RETURN_INFO_METRICS)
            assert not current_flags().is_feature_enabled(AWS_SDK_V2)
        assert current_flags() is outer
        assert current_flags().is_feature_enabled(AWS_SDK_V2)


def test_context_restored_when_block_raises():
    try:
        with flags_in_context(_AllEnabled()):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert current_flags().is_feature_enabled("anything") is False


def test_feature_flag_set_membership():
    flags = FeatureFlagSet(["a", "b"])
    assert flags.is_feature_enabled("a") is True
    assert flags.is_feature_enabled("b") is True
    assert flags.is_feature_enabled("c") is False


def test_empty_feature_flag_set_enables_nothing():
    assert FeatureFlagSet().is_feature_enabled(AWS_SDK_V2) is False


def test_no_feature_flags_is_always_disabled():
    flags = NoFeatureFlags()
    assert flags.is_feature_enabled(AWS_SDK_V2) is False
    assert flags.is_feature_enabled(ALWAYS_RETURN_INFO_METRICS) is False


def test_flag_names():
    flags = FeatureFlagSet([AWS_SDK_V2, ALWAYS_RETURN_INFO_METRICS])
    assert flags.is_feature_enabled("aws-sdk-v2") is True
    assert flags.is_feature_enabled("always-return-info-metrics") is True
    assert FeatureFlagSet([AWS_SDK_V2]).is_feature_enabled("always-return-info-metrics") is False