"""Release automation for multi-module library builds."""

__version__ = "0.1.0"
