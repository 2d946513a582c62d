from __future__ import annotations


class FanMatchError(Exception):
    """Base class for errors raised by the matching engine."""


class InvalidInput(FanMatchError, ValueError):
    """Non-numeric temperature, malformed curves or a malformed request."""


class EmptyCatalog(InvalidInput):
    """No fan records were supplied; the whole request fails."""
