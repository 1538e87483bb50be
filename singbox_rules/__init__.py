"""Build sing-box binary rule sets from plain-text rule lists."""

__version__ = "1.0.0"
