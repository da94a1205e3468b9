"""Configuration, service catalogue, feature flags and scrape options for a CloudWatch metrics exporter."""

__version__ = "0.1.0"
__all__ = ["config", "feature_flags", "options", "services"]