"""
Abstract interface to the remote note service.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "APP_NAME",
    "RemoteGroup",
    "RemoteNote",
    "NotePayload",
    "BaseGateway",
]

APP_NAME = "evermark"
"""
Source application tag marking notes as managed by Evermark.
"""


@dataclass(kw_only=True)
class RemoteGroup:
    """
    Named remote container of notes.
    """

    group_id: str
    name: str


@dataclass(kw_only=True)
class RemoteNote:
    """
    Remote note as returned by a gateway.
    """

    note_id: str
    title: str
    group_id: str | None = None
    label_names: list[str] | None = None

    absolute_path: Path | None = None
    """
    Local document this note was published from; set by
    {obj}`Evermark` for convenience of the caller.
    """


@dataclass(kw_only=True)
class NotePayload:
    """
    Everything needed to create or update a remote note from a document.
    Only exists for the duration of a publish operation.
    """

    title: str
    body: str
    """
    Rendered markup.
    """

    absolute_path: Path
    relative_path: str

    group_id: str | None = None
    label_names: list[str] | None = None

    source_application: str = APP_NAME
    read_only: bool = True
    """
    Whether other clients should present the note as read-only.
    """


class BaseGateway(ABC):
    """
    Capability to manage notes and groups in a remote note service.

    Implementations raise {obj}`EvermarkError` subclasses; in particular
    {obj}`update_note` must raise {obj}`NoteNotFoundError` if the target
    note no longer exists, as this is how stale mappings are detected.
    """

    @abstractmethod
    def list_groups(self) -> list[RemoteGroup]:
        ...

    @abstractmethod
    def create_group(self, name: str) -> RemoteGroup:
        ...

    @abstractmethod
    def create_note(self, payload: NotePayload) -> RemoteNote:
        ...

    @abstractmethod
    def update_note(self, note_id: str, payload: NotePayload) -> RemoteNote:
        ...

    @abstractmethod
    def delete_note(self, note_id: str):
        ...
