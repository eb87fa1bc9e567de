"""Idempotent source patching, content checks and HTTP probes for live debugging sessions."""

__version__ = "0.1.0"
