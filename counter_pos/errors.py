"""Exception hierarchy shared by stores, backends and the UI."""

from __future__ import annotations


class PosError(Exception):
    """Base class for every error raised by counter-pos."""


class StorageError(PosError):
    """The backing store is unreachable or a statement failed.

    Nothing is committed when this is raised.
    """


class ValidationError(PosError, ValueError):
    """Input rejected at the order-entry boundary or by a model constructor."""


class DuplicateBillNumberError(PosError):
    """A bill number was issued twice for the same date."""

    def __init__(self, bill_number: str, date: str) -> None:
        super().__init__(f"bill {bill_number} already recorded for {date}")
        self.bill_number = bill_number
        self.date = date


class AdminLockedError(PosError):
    """Admin login attempted while the lockout window is active."""

    def __init__(self, seconds_left: int) -> None:
        super().__init__(f"Too many attempts. Try again in {seconds_left} seconds.")
        self.seconds_left = seconds_left
