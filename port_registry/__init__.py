"""Lookup of registered and unregistered ports from the IANA port registry."""

__version__ = "0.1.0"
