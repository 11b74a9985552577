# -*- coding: utf-8 -*-
# ccex/core/kernel/errors.py
# Error kinds raised by drivers. Match on the class, not on the message.


class CcexError(Exception):
    """
    Base class for every error raised by a venue driver.

    Args:
        message: human readable description
        venue: venue name, e.g. 'binance'
        operation: HTTP method or contract operation that failed
        path: venue path that was being called
        payload: raw venue payload (text) when the venue answered
    """

    def __init__(self, message, venue=None, operation=None, path=None, payload=None):
        super(CcexError, self).__init__(message)
        self.message = message
        self.venue = venue
        self.operation = operation
        self.path = path
        self.payload = payload

    def __str__(self):
        prefix = []
        if self.venue:
            prefix.append("[%s]" % self.venue)
        if self.operation:
            prefix.append(str(self.operation))
        if self.path:
            prefix.append(str(self.path))
        if not prefix:
            return self.message
        return "%s: %s" % (" ".join(prefix), self.message)


class TransportFailure(CcexError):
    """Socket, DNS, TLS or timeout failure."""


class DecodeFailure(CcexError):
    """Body could not be read or parsed as JSON."""


class SchemaMismatch(CcexError):
    """Expected field absent or of the wrong kind."""


class AuthFailure(CcexError):
    """Venue rejected the credentials, or no credentials could be obtained."""


class VenueError(CcexError):
    """Venue answered with a business error (insufficient balance, unknown order...)."""


class UnknownPair(CcexError, KeyError):
    """Pair or symbol is not in the venue's current universe."""

    def __str__(self):
        return CcexError.__str__(self)


class PrecisionUnknown(CcexError):
    """Venue lists the pair but publishes no precision for it."""


class UnknownVenue(CcexError, KeyError):
    """Venue name is not registered."""

    def __str__(self):
        return CcexError.__str__(self)


class InsufficientDepth(CcexError):
    """Board walk ran out of levels before the requested amount was filled."""
