[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cwexporter"
version = "0.1.0"
description = "Configuration model, service catalogue and scrape options for a CloudWatch metrics exporter"
requires-python = ">=3.10"
keywords = ["cloudwatch", "prometheus", "exporter", "monitoring", "configuration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cwexporter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
