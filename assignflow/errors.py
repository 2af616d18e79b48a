"""
Errors
======

Exception hierarchy for assignflow.

Construction errors for items surface as pydantic ``ValidationError``
(a ``ValueError``) and never reach the queue.
"""


class AssignflowError(Exception):
    """Base class for assignflow errors."""


class ProtocolError(AssignflowError, RuntimeError):
    """The producer/consumer completion protocol was violated.

    Raised when production is marked done twice, when an item is pushed
    after production was marked done, or when the total count is read
    before it has been published.
    """


class ProductionError(AssignflowError):
    """The producer could not build its batch of items."""


class ItemsFileError(AssignflowError, ValueError):
    """An items file could not be read or contains malformed entries."""
