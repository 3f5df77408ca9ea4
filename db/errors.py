"""Errors raised by the record store.

Every SQLAlchemy failure surfaced by a store verb is re-raised as one of
these, chained to the driver error.
"""


class StoreError(Exception):
    """Base class for record store failures."""


class ValidationError(StoreError):
    """A record was rejected: missing required field, constraint violation,
    or a create of a record that already has an identifier."""


class RecordNotFoundError(StoreError):
    """An identifier did not match any stored record."""
