"""Scrape configuration: YAML decoding, validation and conversion to job models."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from itertools import chain
from pathlib import Path
from typing import Any

import yaml

from cwexporter.services import DimensionsRegexp, get_service

DEFAULT_PERIOD_SECONDS = 300
DEFAULT_LENGTH_SECONDS = 300
DEFAULT_DELAY_SECONDS = 0
SUPPORTED_API_VERSION = "v1alpha1"

_NO_ROLES = (
    "no IAM roles configured. If the current IAM role is desired, "
    "an empty Role should be configured"
)

_log = logging.getLogger(__name__)

Converter = Callable[[Any, str, list], Any]


class ConfigError(ValueError):
    """The configuration cannot be decoded or is not valid."""


# --- decoding helpers -------------------------------------------------------


def _yaml(key: str, convert: Converter, *, default: Any = None, default_factory: Any = None) -> Any:
    metadata = {"yaml": key, "convert": convert}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _decode(cls: type, data: Any, where: str, unknown: list[str]) -> Any:
    """Build ``cls`` from a mapping, collecting unknown keys into ``unknown``."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: cannot unmarshal {type(data).__name__} into {cls.__name__}")
    by_key = {f.metadata["yaml"]: f for f in fields(cls) if "yaml" in f.metadata}
    unknown.extend(
        f"field {key} not found in type {cls.__name__}" for key in data if key not in by_key
    )
    values = {
        f.name: f.metadata["convert"](data[key], f"{where}.{key}", unknown)
        for key, f in by_key.items()
        if key in data
    }
    return cls(**values)


def _as_str(value: Any, where: str, unknown: list[str]) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{where}: cannot unmarshal {type(value).__name__} into a string")


def _as_int(value: Any, where: str, unknown: list[str]) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: cannot unmarshal {value!r} into an integer")
    return value


def _as_opt_int(value: Any, where: str, unknown: list[str]) -> int | None:
    return None if value is None else _as_int(value, where, unknown)


def _as_bool(value: Any, where: str, unknown: list[str]) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: cannot unmarshal {value!r} into a boolean")
    return value


def _as_opt_bool(value: Any, where: str, unknown: list[str]) -> bool | None:
    return None if value is None else _as_bool(value, where, unknown)


def _as_str_list(value: Any, where: str, unknown: list[str]) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"{where}: cannot unmarshal {type(value).__name__} into a list")
    return [_as_str(item, f"{where}[{idx}]", unknown) for idx, item in enumerate(value)]


def _list_of(cls: type) -> Converter:
    def convert(value: Any, where: str, unknown: list[str]) -> list | None:
        if value is None:
            return None
        if not isinstance(value, list):
            raise ConfigError(f"{where}: cannot unmarshal {type(value).__name__} into a list")
        return [_decode(cls, item, f"{where}[{idx}]", unknown) for idx, item in enumerate(value)]

    return convert


def _nested(cls: type) -> Converter:
    def convert(value: Any, where: str, unknown: list[str]) -> Any:
        return _decode(cls, value, where, unknown)

    return convert


def _as_tags_map(value: Any, where: str, unknown: list[str]) -> dict[str, list[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: cannot unmarshal {type(value).__name__} into a mapping")
    return {
        _as_str(key, where, unknown): _as_str_list(tags, f"{where}.{key}", unknown) or []
        for key, tags in value.items()
    }


def _pick(own: int, inherited: int, default: int) -> int:
    if own:
        return own
    if inherited:
        return inherited
    return default


def _pick_flag(own: bool | None, inherited: bool | None) -> bool:
    if own is not None:
        return own
    if inherited is not None:
        return inherited
    return False


# --- configuration types ----------------------------------------------------


@dataclass(frozen=True)
class Tag:
    """A tag key and value."""

    key: str = _yaml("key", _as_str, default="")
    value: str = _yaml("value", _as_str, default="")


@dataclass(frozen=True)
class SearchTag:
    """A tag key with a compiled pattern its value must match."""

    key: str
    value: re.Pattern[str]


@dataclass(frozen=True)
class Role:
    """An IAM role to assume; the empty role means the current credentials."""

    role_arn: str = _yaml("roleArn", _as_str, default="")
    external_id: str = _yaml("externalId", _as_str, default="")

    def validate(self, role_idx: int, parent: str) -> None:
        """Raise ConfigError when an external id is given without a role ARN."""
        if not self.role_arn and self.external_id:
            raise ConfigError(f"Role [{role_idx}] in {parent}: RoleArn should not be empty")


@dataclass(frozen=True)
class Dimension:
    """A CloudWatch dimension name and value."""

    name: str = _yaml("name", _as_str, default="")
    value: str = _yaml("value", _as_str, default="")


@dataclass
class MetricConfig:
    """A validated metric with every setting resolved."""

    name: str
    statistics: list[str] = field(default_factory=list)
    period: int = DEFAULT_PERIOD_SECONDS
    length: int = DEFAULT_LENGTH_SECONDS
    delay: int = DEFAULT_DELAY_SECONDS
    nil_to_zero: bool | None = False
    add_cloudwatch_timestamp: bool | None = False


@dataclass
class _JobLevelMetricFields:
    statistics: list[str] | None = _yaml("statistics", _as_str_list)
    period: int = _yaml("period", _as_int, default=0)
    length: int = _yaml("length", _as_int, default=0)
    delay: int = _yaml("delay", _as_int, default=0)
    nil_to_zero: bool | None = _yaml("nilToZero", _as_opt_bool)
    add_cloudwatch_timestamp: bool | None = _yaml("addCloudwatchTimestamp", _as_opt_bool)


@dataclass
class Metric(_JobLevelMetricFields):
    """A metric as written in the configuration file."""

    name: str = _yaml("name", _as_str, default="")

    def _validate(self, metric_idx: int, parent: str, job: _JobLevelMetricFields | None) -> None:
        where = f"Metric [{self.name}/{metric_idx}] in {parent}"
        if not self.name:
            raise ConfigError(f"{where}: Name should not be empty")

        statistics = self.statistics
        if not statistics and job is not None:
            if job.statistics:
                statistics = job.statistics
            else:
                raise ConfigError(f"{where}: Statistics should not be empty")

        period = _pick(self.period, job.period if job is not None else 0, DEFAULT_PERIOD_SECONDS)
        if period < 1:
            raise ConfigError(f"{where}: Period value should be a positive integer")
        length = _pick(self.length, job.length if job is not None else 0, DEFAULT_LENGTH_SECONDS)
        delay = _pick(self.delay, job.delay if job is not None else 0, DEFAULT_DELAY_SECONDS)
        nil_to_zero = _pick_flag(self.nil_to_zero, job.nil_to_zero if job is not None else None)
        add_timestamp = _pick_flag(
            self.add_cloudwatch_timestamp,
            job.add_cloudwatch_timestamp if job is not None else None,
        )

        if length < period:
            raise ConfigError(
                f"{where}: length({length}) is smaller than period({period}). "
                "This can cause that the data requested is not ready and generate data gaps"
            )
        self.length = length
        self.period = period
        self.delay = delay
        self.nil_to_zero = nil_to_zero
        self.add_cloudwatch_timestamp = add_timestamp
        self.statistics = statistics

    def _to_model(self) -> MetricConfig:
        return MetricConfig(
            name=self.name,
            statistics=list(self.statistics or []),
            period=self.period,
            length=self.length,
            delay=self.delay,
            nil_to_zero=self.nil_to_zero,
            add_cloudwatch_timestamp=self.add_cloudwatch_timestamp,
        )


def _validate_roles(roles: list[Role] | None, parent: str) -> None:
    if not roles:
        raise ConfigError(_NO_ROLES)
    for role_idx, role in enumerate(roles):
        role.validate(role_idx, parent)


@dataclass
class Job(_JobLevelMetricFields):
    """A discovery job as written in the configuration file."""

    regions: list[str] | None = _yaml("regions", _as_str_list)
    type: str = _yaml("type", _as_str, default="")
    roles: list[Role] | None = _yaml("roles", _list_of(Role))
    search_tags: list[Tag] | None = _yaml("searchTags", _list_of(Tag))
    custom_tags: list[Tag] | None = _yaml("customTags", _list_of(Tag))
    dimension_name_requirements: list[str] | None = _yaml("dimensionNameRequirements", _as_str_list)
    metrics: list[Metric] | None = _yaml("metrics", _list_of(Metric))
    rounding_period: int | None = _yaml("roundingPeriod", _as_opt_int)
    recently_active_only: bool = _yaml("recentlyActiveOnly", _as_bool, default=False)
    include_context_on_info_metrics: bool = _yaml(
        "includeContextOnInfoMetrics", _as_bool, default=False
    )

    def _validate(self, job_idx: int) -> None:
        if not self.type:
            raise ConfigError(f"Discovery job [{job_idx}]: Type should not be empty")
        if get_service(self.type) is None:
            raise ConfigError(
                f"Discovery job [{job_idx}]: Service is not in known list!: {self.type}"
            )
        parent = f"Discovery job [{self.type}/{job_idx}]"
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(f"{parent}: Regions should not be empty")
        if not self.metrics:
            raise ConfigError(f"{parent}: Metrics should not be empty")
        for metric_idx, metric in enumerate(self.metrics):
            metric._validate(metric_idx, parent, self)
        for search_tag in self.search_tags or []:
            try:
                re.compile(search_tag.value)
            except re.error as err:
                raise ConfigError(
                    f"{parent}: search tag value for {search_tag.key} has invalid regex value "
                    f"{search_tag.value}: {err}"
                ) from err


@dataclass
class Static:
    """A static job as written in the configuration file."""

    name: str = _yaml("name", _as_str, default="")
    regions: list[str] | None = _yaml("regions", _as_str_list)
    roles: list[Role] | None = _yaml("roles", _list_of(Role))
    namespace: str = _yaml("namespace", _as_str, default="")
    custom_tags: list[Tag] | None = _yaml("customTags", _list_of(Tag))
    dimensions: list[Dimension] | None = _yaml("dimensions", _list_of(Dimension))
    metrics: list[Metric] | None = _yaml("metrics", _list_of(Metric))

    def _validate(self, job_idx: int) -> None:
        if not self.name:
            raise ConfigError(f"Static job [{job_idx}]: Name should not be empty")
        parent = f"Static job [{self.name}/{job_idx}]"
        if not self.namespace:
            raise ConfigError(f"{parent}: Namespace should not be empty")
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(f"{parent}: Regions should not be empty")
        for metric_idx, metric in enumerate(self.metrics or []):
            metric._validate(metric_idx, parent, None)


@dataclass
class CustomNamespace(_JobLevelMetricFields):
    """A custom namespace job as written in the configuration file."""

    regions: list[str] | None = _yaml("regions", _as_str_list)
    name: str = _yaml("name", _as_str, default="")
    namespace: str = _yaml("namespace", _as_str, default="")
    recently_active_only: bool = _yaml("recentlyActiveOnly", _as_bool, default=False)
    roles: list[Role] | None = _yaml("roles", _list_of(Role))
    metrics: list[Metric] | None = _yaml("metrics", _list_of(Metric))
    custom_tags: list[Tag] | None = _yaml("customTags", _list_of(Tag))
    dimension_name_requirements: list[str] | None = _yaml("dimensionNameRequirements", _as_str_list)
    rounding_period: int | None = _yaml("roundingPeriod", _as_opt_int)

    def _validate(self, job_idx: int) -> None:
        if not self.name:
            raise ConfigError(f"CustomNamespace job [{job_idx}]: Name should not be empty")
        if not self.namespace:
            raise ConfigError(f"CustomNamespace job [{job_idx}]: Namespace should not be empty")
        parent = f"CustomNamespace job [{self.namespace}/{job_idx}]"
        _validate_roles(self.roles, parent)
        if not self.regions:
            raise ConfigError(
                f"CustomNamespace job [{self.name}/{job_idx}]: Regions should not be empty"
            )
        if not self.metrics:
            raise ConfigError(
                f"CustomNamespace job [{self.name}/{job_idx}]: Metrics should not be empty"
            )
        for metric_idx, metric in enumerate(self.metrics):
            metric._validate(metric_idx, parent, self)


@dataclass
class Discovery:
    """Discovery jobs and the tags to export on their metrics, by namespace or alias."""

    exported_tags_on_metrics: dict[str, list[str]] = _yaml(
        "exportedTagsOnMetrics", _as_tags_map, default_factory=dict
    )
    jobs: list[Job] | None = _yaml("jobs", _list_of(Job))


# --- model types ------------------------------------------------------------


@dataclass
class DiscoveryJob:
    """A validated discovery job."""

    type: str = ""
    regions: list[str] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    search_tags: list[SearchTag] = field(default_factory=list)
    custom_tags: list[Tag] = field(default_factory=list)
    dimension_name_requirements: list[str] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)
    rounding_period: int | None = None
    recently_active_only: bool = False
    include_context_on_info_metrics: bool = False
    statistics: list[str] = field(default_factory=list)
    period: int = 0
    length: int = 0
    delay: int = 0
    nil_to_zero: bool | None = None
    add_cloudwatch_timestamp: bool | None = None
    exported_tags_on_metrics: list[str] = field(default_factory=list)
    dimensions_regexps: list[DimensionsRegexp] = field(default_factory=list)


@dataclass
class StaticJob:
    """A validated static job."""

    name: str = ""
    namespace: str = ""
    regions: list[str] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    custom_tags: list[Tag] = field(default_factory=list)
    dimensions: list[Dimension] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)


@dataclass
class CustomNamespaceJob:
    """A validated custom namespace job."""

    name: str = ""
    namespace: str = ""
    regions: list[str] = field(default_factory=list)
    roles: list[Role] = field(default_factory=list)
    custom_tags: list[Tag] = field(default_factory=list)
    dimension_name_requirements: list[str] = field(default_factory=list)
    metrics: list[MetricConfig] = field(default_factory=list)
    rounding_period: int | None = None
    recently_active_only: bool = False
    statistics: list[str] = field(default_factory=list)
    period: int = 0
    length: int = 0
    delay: int = 0
    nil_to_zero: bool | None = None
    add_cloudwatch_timestamp: bool | None = None


@dataclass
class JobsConfig:
    """Every validated job of a configuration."""

    sts_region: str = ""
    discovery_jobs: list[DiscoveryJob] = field(default_factory=list)
    static_jobs: list[StaticJob] = field(default_factory=list)
    custom_namespace_jobs: list[CustomNamespaceJob] = field(default_factory=list)


@dataclass
class ScrapeConf:
    """The configuration file as decoded, before validation."""

    api_version: str = _yaml("apiVersion", _as_str, default="")
    sts_region: str = _yaml("sts-region", _as_str, default="")
    discovery: Discovery = _yaml("discovery", _nested(Discovery), default_factory=Discovery)
    static: list[Static] | None = _yaml("static", _list_of(Static))
    custom_namespace: list[CustomNamespace] | None = _yaml(
        "customNamespace", _list_of(CustomNamespace)
    )

    @classmethod
    def from_dict(cls, data: Any) -> ScrapeConf:
        """Decode a configuration mapping; unknown keys are ignored."""
        return _decode(cls, data, "config", [])

    def validate(self) -> JobsConfig:
        """Check every job, fill in metric defaults and return the job models."""
        if self.discovery.jobs is None and self.static is None and self.custom_namespace is None:
            raise ConfigError(
                "At least 1 Discovery job, 1 Static or one CustomNamespace must be defined"
            )
        for job_idx, job in enumerate(self.discovery.jobs or []):
            job._validate(job_idx)
        for job_idx, custom in enumerate(self.custom_namespace or []):
            custom._validate(job_idx)
        for job_idx, static in enumerate(self.static or []):
            static._validate(job_idx)
        if self.api_version and self.api_version != SUPPORTED_API_VERSION:
            raise ConfigError(f"unknown apiVersion value '{self.api_version}'")
        return self._to_model()

    def _default_roles(self) -> None:
        jobs = chain(self.discovery.jobs or [], self.custom_namespace or [], self.static or [])
        for job in jobs:
            if not job.roles:
                job.roles = [Role()]

    def _exported_tags(self, namespace: str, alias: str) -> list[str]:
        exported = self.discovery.exported_tags_on_metrics
        if namespace in exported:
            return list(exported[namespace])
        return list(exported.get(alias, []))

    def _to_model(self) -> JobsConfig:
        jobs_cfg = JobsConfig(sts_region=self.sts_region)

        for job in self.discovery.jobs or []:
            svc = get_service(job.type)
            assert svc is not None  # guaranteed by validation
            jobs_cfg.discovery_jobs.append(
                DiscoveryJob(
                    type=job.type,
                    regions=list(job.regions or []),
                    roles=list(job.roles or []),
                    search_tags=[
                        SearchTag(key=tag.key, value=re.compile(tag.value))
                        for tag in job.search_tags or []
                    ],
                    custom_tags=list(job.custom_tags or []),
                    dimension_name_requirements=list(job.dimension_name_requirements or []),
                    metrics=[metric._to_model() for metric in job.metrics or []],
                    rounding_period=job.rounding_period,
                    recently_active_only=job.recently_active_only,
                    include_context_on_info_metrics=job.include_context_on_info_metrics,
                    statistics=list(job.statistics or []),
                    period=job.period,
                    length=job.length,
                    delay=job.delay,
                    nil_to_zero=job.nil_to_zero,
                    add_cloudwatch_timestamp=job.add_cloudwatch_timestamp,
                    exported_tags_on_metrics=self._exported_tags(svc.namespace, svc.alias),
                    dimensions_regexps=svc.to_model_dimensions_regexp(),
                )
            )

        for static in self.static or []:
            jobs_cfg.static_jobs.append(
                StaticJob(
                    name=static.name,
                    namespace=static.namespace,
                    regions=list(static.regions or []),
                    roles=list(static.roles or []),
                    custom_tags=list(static.custom_tags or []),
                    dimensions=list(static.dimensions or []),
                    metrics=[metric._to_model() for metric in static.metrics or []],
                )
            )

        for custom in self.custom_namespace or []:
            jobs_cfg.custom_namespace_jobs.append(
                CustomNamespaceJob(
                    name=custom.name,
                    namespace=custom.namespace,
                    regions=list(custom.regions or []),
                    roles=list(custom.roles or []),
                    custom_tags=list(custom.custom_tags or []),
                    dimension_name_requirements=list(custom.dimension_name_requirements or []),
                    metrics=[metric._to_model() for metric in custom.metrics or []],
                    rounding_period=custom.rounding_period,
                    recently_active_only=custom.recently_active_only,
                    statistics=list(custom.statistics or []),
                    period=custom.period,
                    length=custom.length,
                    delay=custom.delay,
                    nil_to_zero=custom.nil_to_zero,
                    add_cloudwatch_timestamp=custom.add_cloudwatch_timestamp,
                )
            )

        return jobs_cfg


def parse_config(text: str | bytes, logger: logging.Logger | None = None) -> JobsConfig:
    """Decode and validate a YAML configuration.

    Unknown keys and a missing apiVersion are logged as warnings; type errors
    and validation failures raise ConfigError.
    """
    logger = logger or _log
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ConfigError(f"invalid YAML: {err}") from err

    syntax_errors: list[str] = []
    conf = _decode(ScrapeConf, data, "config", syntax_errors)
    if not conf.api_version:
        syntax_errors.append("missing apiVersion")
    if syntax_errors:
        for message in syntax_errors:
            logger.warning("config file syntax error: %s", message)
        logger.warning(
            "Config file error(s) detected: Yace might not work as expected. "
            "Future versions of Yace might fail to run with an invalid config file."
        )

    conf._default_roles()
    return conf.validate()


def load_config(path: str | Path, logger: logging.Logger | None = None) -> JobsConfig:
    """Read, decode and validate the configuration file at ``path``."""
    return parse_config(Path(path).read_text(encoding="utf-8"), logger)