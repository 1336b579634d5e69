"""NOC alert provisioning: CloudWatch validation, template matching and alert rule building."""

__version__ = "0.1.0"
