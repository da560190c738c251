"""autodroid: template-driven screen automation for Android devices."""

__version__ = "0.1.0"
