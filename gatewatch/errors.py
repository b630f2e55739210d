"""
Exception hierarchy for GateWatch.

Synchronous callers (API handlers, the tracking service) let these propagate
and map them to HTTP status codes. The background schedulers catch them per
flight, log, and move on to the next flight.
"""


class GateWatchError(Exception):
    """Base class for all GateWatch errors."""
    status_code = 500


class NotFoundError(GateWatchError):
    """A flight, user, location or airport is absent."""
    status_code = 404


class FlightNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class LocationNotFoundError(NotFoundError):
    pass


class AirportNotFoundError(NotFoundError):
    pass


class ValidationError(GateWatchError):
    """Malformed input, rejected before any I/O."""
    status_code = 400


class ProviderError(GateWatchError):
    """The aviation data provider failed (timeout, bad response, ...)."""
    status_code = 502


class UnsupportedProviderError(ProviderError):
    """Configured provider name is not one of the known adapters."""


class ProviderNotImplementedError(ProviderError):
    """Provider adapter exists but has no working integration yet."""


class PersistenceError(GateWatchError):
    """Database or cache operation failed."""
    status_code = 503


class PushError(GateWatchError):
    """Push transport rejected or failed to deliver a message."""
