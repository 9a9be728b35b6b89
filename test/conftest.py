import logging
from pathlib import Path
from typing import Callable, Generator

from pytest import fixture

from evermark import (
    BaseGateway,
    Config,
    Evermark,
    NoteNotFoundError,
    NotePayload,
    RemoteGroup,
    RemoteNote,
    Workspace,
)

logging.basicConfig(level=logging.WARNING)

HOST = "http://localhost:8080"
TOKEN = "test-token"


class FakeGateway(BaseGateway):
    """
    In-memory gateway recording the calls made to it.
    """

    groups: list[RemoteGroup]
    notes: dict[str, NotePayload]
    calls: list[tuple[str, ...]]

    update_error: Exception | None = None
    """
    If set, raised by update_note instead of updating.
    """

    create_error: Exception | None = None
    group_error: Exception | None = None
    delete_error: Exception | None = None

    def __init__(self):
        self.groups = []
        self.notes = {}
        self.calls = []
        self._next_id = 0

    def count(self, name: str) -> int:
        return len([c for c in self.calls if c[0] == name])

    def list_groups(self) -> list[RemoteGroup]:
        self.calls.append(("list_groups",))
        return list(self.groups)

    def create_group(self, name: str) -> RemoteGroup:
        self.calls.append(("create_group", name))

        if self.group_error is not None:
            raise self.group_error

        group = RemoteGroup(group_id=self._new_id("group"), name=name)
        self.groups.append(group)
        return group

    def create_note(self, payload: NotePayload) -> RemoteNote:
        if self.create_error is not None:
            self.calls.append(("create_note",))
            raise self.create_error

        note_id = self._new_id("note")
        self.calls.append(("create_note", note_id))
        self.notes[note_id] = payload
        return self._to_note(note_id, payload)

    def update_note(self, note_id: str, payload: NotePayload) -> RemoteNote:
        self.calls.append(("update_note", note_id))

        if self.update_error is not None:
            raise self.update_error

        if note_id not in self.notes:
            raise NoteNotFoundError(note_id)

        self.notes[note_id] = payload
        return self._to_note(note_id, payload)

    def delete_note(self, note_id: str):
        self.calls.append(("delete_note", note_id))

        if self.delete_error is not None:
            raise self.delete_error

        if note_id not in self.notes:
            raise NoteNotFoundError(note_id)

        del self.notes[note_id]

    def _new_id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}{self._next_id:04}"

    def _to_note(self, note_id: str, payload: NotePayload) -> RemoteNote:
        return RemoteNote(
            note_id=note_id,
            title=payload.title,
            group_id=payload.group_id,
            label_names=payload.label_names,
        )


@fixture
def workspace(tmp_path: Path) -> Workspace:
    """
    Create a new workspace in a temporary folder.
    """
    return Workspace.init(tmp_path, Config(host=HOST, token=TOKEN))


@fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@fixture
def evermark(
    workspace: Workspace, gateway: FakeGateway
) -> Generator[Evermark, None, None]:
    evermark = Evermark(workspace.root, gateway=gateway)
    yield evermark
    evermark.reset()


@fixture
def write_note(workspace: Workspace) -> Callable[[str, str], Path]:
    """
    Get function to write a document under the workspace's notes folder.
    """

    def write(name: str, content: str) -> Path:
        path = workspace.notes_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return write
