"""
Typed failures surfaced by Evermark.
"""
from __future__ import annotations

from enum import Enum, auto

__all__ = [
    "ErrorKind",
    "EvermarkError",
    "GroupCreateError",
    "NoteNotFoundError",
    "NoteCreateError",
    "NoteUpdateError",
    "NoteDeleteError",
    "NotPublishedError",
    "StoreIOError",
    "WorkspaceNotFoundError",
    "ConfigError",
    "ConnectError",
    "DocumentReadError",
]


class ErrorKind(Enum):
    """
    Kind of failure, inspected by callers instead of error messages.
    """

    METADATA_MALFORMED = auto()
    """
    Reserved; malformed directives are treated as absent and never raised.
    """

    GROUP_CREATE_FAILED = auto()
    NOTE_NOT_FOUND = auto()
    NOTE_CREATE_FAILED = auto()
    NOTE_UPDATE_FAILED = auto()
    NOTE_DELETE_FAILED = auto()
    NOT_PUBLISHED = auto()
    STORE_IO_FAILED = auto()
    WORKSPACE_NOT_FOUND = auto()
    CONFIG_INVALID = auto()
    CONNECT_FAILED = auto()
    DOCUMENT_READ_FAILED = auto()


class EvermarkError(Exception):
    """
    Base class of all failures raised by Evermark.
    """

    kind: ErrorKind


class GroupCreateError(EvermarkError):
    """
    Raised when a remote group could not be listed or created.
    """

    kind = ErrorKind.GROUP_CREATE_FAILED


class NoteNotFoundError(EvermarkError):
    """
    Raised when a remote note no longer exists, e.g. it was deleted from
    another client.
    """

    kind = ErrorKind.NOTE_NOT_FOUND

    note_id: str

    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"Remote note not found: {note_id}")


class NoteCreateError(EvermarkError):
    kind = ErrorKind.NOTE_CREATE_FAILED


class NoteUpdateError(EvermarkError):
    """
    Raised when a remote note update fails for any reason other than the
    note being missing.
    """

    kind = ErrorKind.NOTE_UPDATE_FAILED


class NoteDeleteError(EvermarkError):
    kind = ErrorKind.NOTE_DELETE_FAILED


class NotPublishedError(EvermarkError):
    """
    Raised when attempting to unpublish a document which has no mapping
    record.
    """

    kind = ErrorKind.NOT_PUBLISHED

    path: str

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} is not a published note")


class StoreIOError(EvermarkError):
    """
    Raised when the mapping store could not be read, parsed or written.
    """

    kind = ErrorKind.STORE_IO_FAILED


class WorkspaceNotFoundError(EvermarkError):
    kind = ErrorKind.WORKSPACE_NOT_FOUND


class ConfigError(EvermarkError):
    kind = ErrorKind.CONFIG_INVALID


class ConnectError(EvermarkError):
    """
    Raised when the remote service could not be reached or login failed.
    """

    kind = ErrorKind.CONNECT_FAILED


class DocumentReadError(EvermarkError):
    """
    Raised when a document could not be read or is not valid UTF-8.
    """

    kind = ErrorKind.DOCUMENT_READ_FAILED
