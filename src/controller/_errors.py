from __future__ import annotations


class ControllerError(Exception):
    """Base class for errors raised by the Controller client."""


class ConfigurationError(ControllerError):
    """
    Raised when the client is constructed without the identity
    fields (API key, project ID) it needs to talk to the collector.
    """


class TransportError(ControllerError):
    """
    Raised when an event could not be delivered to the collector.

    :param status: HTTP status returned by the collector, if any.
    """

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status
