# cwexporter

Configuration handling for a CloudWatch-to-Prometheus metrics exporter:

- `cwexporter.services`: the catalogue of supported CloudWatch namespaces,
  with the tagging-API resource filters and the ARN patterns used to derive
  dimensions;
- `cwexporter.config`: decoding and validating the YAML scrape configuration
  into job models;
- `cwexporter.feature_flags`: feature flags carried through a scrape in a
  context variable;
- `cwexporter.options`: scrape options such as query batch size and API
  concurrency limits.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Loading a configuration

```python
import logging
from cwexporter.config import load_config, ConfigError

logger = logging.getLogger("cwexporter")

try:
    jobs = load_config("config.yml", logger)
except ConfigError as exc:
    print(f"invalid configuration: {exc}")
else:
    for job in jobs.discovery_jobs:
        print(job.type, job.regions, [m.name for m in job.metrics])
```

A minimal configuration file:

```yaml
apiVersion: v1alpha1
discovery:
  jobs:
    - type: sqs
      regions: [us-east-2]
      metrics:
        - name: NumberOfMessagesSent
          statistics: [Average]
```

`load_config(path, logger)` reads a file; `parse_config(text, logger)` does the
same for YAML already in memory. Both return a `JobsConfig` holding
`discovery_jobs`, `static_jobs`, `custom_namespace_jobs` and `sts_region`.
When no logger is given, the module's own logger is used.

What they do:

- Unknown keys and a missing `apiVersion` are logged as warnings, not errors.
- Jobs without `roles` get a single empty `Role`, meaning the current
  credentials.
- Each metric's `period`, `length`, `delay`, `nilToZero` and
  `addCloudwatchTimestamp` come from the metric itself, else from the
  discovery or custom-namespace job, else from the defaults (300, 300, 0,
  false, false). Metrics of static jobs take nothing from the job.
- Metrics of discovery and custom-namespace jobs need `statistics`, either on
  the metric or on the job.
- `ConfigError` (a `ValueError`) is raised for invalid YAML, values of the
  wrong type, no jobs at all, an unknown discovery `type`, empty names,
  namespaces, regions or metrics, an `externalId` without a `roleArn`, a
  non-positive period, a `length` shorter than `period`, an invalid
  search-tag regex, and an `apiVersion` other than `v1alpha1`.

Discovery jobs also carry the service's dimension regexps and the tags listed
under `discovery.exportedTagsOnMetrics` for the service's namespace, or
failing that its alias.

`ScrapeConf.from_dict(data).validate()` works from a plain dictionary. It
does not fill in default roles, so a job without `roles` fails validation
with "no IAM roles configured…"; give `roles: [{}]` for the current
credentials.

## Looking up services

```python
from cwexporter.services import get_service, SUPPORTED_SERVICES

svc = get_service("ec2")          # alias or namespace, e.g. "AWS/EC2"
print(svc.namespace, svc.resource_filters)
for dr in svc.to_model_dimensions_regexp():
    print(dr.regexp.pattern, dr.dimensions_names)
```

`get_service` returns `None` for an unknown type. In dimension names, an
underscore in a regexp group name becomes a space (`Cluster_Name` gives
`"Cluster Name"`).

## Options and feature flags

```python
from cwexporter.options import (
    build_options, metrics_per_query, cloudwatch_api_concurrency,
    enable_feature_flag,
)
from cwexporter.feature_flags import flags_in_context, current_flags

opts = build_options(
    metrics_per_query(250),
    cloudwatch_api_concurrency(10),
    enable_feature_flag("always-return-info-metrics"),
)

with flags_in_context(opts.feature_flags):
    assert current_flags().is_feature_enabled("always-return-info-metrics")
```

`build_options` applies the options in order to the defaults (500 metrics per
query, no snake-case labels, tagging concurrency 5, CloudWatch concurrency 5
shared by all APIs). The other option functions are `labels_snake_case`,
`cloudwatch_per_api_limit_concurrency` and `tagging_api_concurrency`. A
non-positive limit raises `ValueError` when `build_options` applies it.

Outside a `flags_in_context` block every feature flag reads as disabled. The
known flag names are `AWS_SDK_V2` and `ALWAYS_RETURN_INFO_METRICS` in
`cwexporter.feature_flags`.

## What this package does not do

It does not talk to AWS: there are no CloudWatch, tagging or STS clients, no
scraping, no Prometheus metrics or HTTP endpoint, and no command-line
program. It provides the configuration, service catalogue, options and
feature flags that such an exporter runs on.