"""Protocols for dependency injection into the bookmark store."""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class ChangeListener(Protocol):
    """Observer notified once after every successful store mutation.

    The notification carries no diff; listeners re-read whatever they show.
    """

    def __call__(self) -> None: ...


@runtime_checkable
class ClockProtocol(Protocol):
    """Source of timezone-aware timestamps for created/updated times."""

    def __call__(self) -> datetime: ...


@runtime_checkable
class IdFactoryProtocol(Protocol):
    """Generator of unique bookmark and group ids."""

    def __call__(self) -> str: ...
