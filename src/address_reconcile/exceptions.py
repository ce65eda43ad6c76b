from __future__ import annotations


class ReconcileError(Exception):
    """Base class for errors raised by address_reconcile."""


class InvalidRecordError(ReconcileError, ValueError):
    """A record reached the matcher without the attributes it depends on."""

    def __init__(self, side: str, index: int, reason: str) -> None:
        super().__init__(f"{side} record #{index} {reason}")
        self.side = side
        self.index = index
        self.reason = reason


class LoaderError(ReconcileError):
    """Loading records from the registry database or the map feed failed."""


class FeedFormatError(LoaderError):
    """The map feed returned a document we cannot interpret."""
