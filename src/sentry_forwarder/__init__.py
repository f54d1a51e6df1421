"""Sentry Forwarder - relays Sentry envelopes from an old DSN to a new one."""

__version__ = "1.0.0"
