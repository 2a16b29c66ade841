"""Consent Log - per-user consent decisions backed by an async SQL store."""

__version__ = "1.0.0"
