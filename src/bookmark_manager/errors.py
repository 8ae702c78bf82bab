"""Exceptions raised by the bookmark manager core."""


class BookmarkManagerError(Exception):
    """Base class for bookmark manager errors."""


class MalformedBookmarkError(BookmarkManagerError, ValueError):
    """A bookmark draft or persisted record lacks a required field.

    This points at a defect in the calling layer, so it is raised instead of
    being reported as a status.
    """


class StoreFileError(BookmarkManagerError):
    """The persisted store file cannot be read or is not a JSON object."""
