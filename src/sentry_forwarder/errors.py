"""Errors raised along the forwarding pipeline."""


class ForwarderError(Exception):
    """Base class for everything the forwarder raises on purpose."""


class ConfigLoadError(ForwarderError):
    """The mapping configuration could not be loaded. Fatal at startup."""


class UnroutableCredential(ForwarderError):
    """No mapping exists for the sentry_key on the request."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown old sentry DSN key: {key}")


class PayloadDecodeError(ForwarderError):
    """The request body is not a valid gzip stream."""


class BodyReadError(ForwarderError):
    """The inbound request body could not be read."""


class TransportError(ForwarderError):
    """The outbound request to the new DSN failed."""
