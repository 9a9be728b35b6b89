"""
Publishing of local markdown documents as remote notes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from logging import Logger
from pathlib import Path

from .config import Config
from .exceptions import (
    DocumentReadError,
    NoteNotFoundError,
    NotPublishedError,
)
from .gateway import BaseGateway, NotePayload, RemoteGroup, RemoteNote
from .markup import MarkupRenderer
from .metadata import parse_note_info
from .store import MappingStore
from .workspace import Workspace

__all__ = [
    "Evermark",
    "PublishOutcome",
    "PublishResult",
]


class PublishOutcome(Enum):
    """
    How a publish operation reconciled the document with the remote service.
    """

    CREATED = auto()
    """Document had no mapping record; a note was created"""

    UPDATED = auto()
    """Existing note was updated in place"""

    REPAIRED = auto()
    """Mapped note no longer existed; a new one was created and the mapping
    record was pointed at it"""


@dataclass(frozen=True, kw_only=True)
class PublishResult:
    outcome: PublishOutcome
    note: RemoteNote
    relative_path: str


class Evermark:
    """
    Publishes documents of a workspace, keeping track of which remote note
    each document was published to.

    The workspace, its configuration, the gateway, the mapping store and
    resolved groups are each set up on first use and kept for the lifetime
    of this object, or until {obj}`Evermark.reset` is invoked. Operations
    are expected to be invoked one at a time.
    """

    _work_dir: Path
    _gateway_override: BaseGateway | None
    _logger: Logger

    _workspace: Workspace | None = None
    _config: Config | None = None
    _gateway: BaseGateway | None = None
    _store: MappingStore | None = None
    _renderer: MarkupRenderer | None = None

    _groups: dict[str, RemoteGroup]
    """
    Groups resolved so far, keyed by name.
    """

    def __init__(
        self,
        work_dir: Path,
        *,
        gateway: BaseGateway | None = None,
        logger: Logger | None = None,
    ):
        """
        :param work_dir: Folder within the workspace
        :param gateway: Gateway to use instead of the one configured in the workspace
        :param logger: Logger to use, or `None` to use default logger
        """
        self._work_dir = work_dir
        self._gateway_override = gateway
        self._logger = logger or logging.getLogger("evermark")
        self._groups = {}

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            self._workspace = Workspace.find(self._work_dir, logger=self._logger)
        return self._workspace

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.workspace.load_config()
        return self._config

    @property
    def gateway(self) -> BaseGateway:
        if self._gateway is None:
            self._gateway = (
                self._gateway_override
                or self.config.create_gateway(logger=self._logger)
            )
        return self._gateway

    @property
    def store(self) -> MappingStore:
        if self._store is None:
            self._store = MappingStore.load(self.workspace.store_path)
        return self._store

    @property
    def renderer(self) -> MarkupRenderer:
        if self._renderer is None:
            self._renderer = MarkupRenderer(self.config.markdown)
        return self._renderer

    def reset(self):
        """
        Drop memoized state so it's set up again on next use. Unpersisted
        changes to the mapping store are discarded.
        """
        self._workspace = None
        self._config = None
        self._gateway = None
        self._store = None
        self._renderer = None
        self._groups = {}

    def create_local_note(self, title: str) -> Path:
        """
        Create a new document in the workspace's notes folder.
        """
        return self.workspace.create_note_file(title)

    def publish_note(self, note_path: Path) -> PublishResult:
        """
        Publish a document, creating or updating its remote note.
        """
        try:
            content = note_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(
                f"Failed to read document '{note_path}': {e}"
            ) from e

        return self.save_note(note_path, content)

    def save_note(self, note_path: Path, content: str) -> PublishResult:
        """
        Publish `content` as the document at `note_path`.
        """
        path_info = self.workspace.get_path_info(note_path)

        tokens = self.renderer.parse(content)
        note_info = parse_note_info(tokens)

        self._logger.debug(
            f"Parsed note info: title='{note_info.title}', group={note_info.group_name}, labels={note_info.label_names}"
        )

        group_id: str | None = None
        if note_info.group_name:
            group_id = self._resolve_group(note_info.group_name).group_id

        payload = NotePayload(
            title=note_info.title,
            body=self.renderer.render(tokens),
            absolute_path=path_info.absolute_path,
            relative_path=path_info.relative_path,
            group_id=group_id,
            label_names=note_info.label_names,
        )

        result = self._save_payload(payload)
        self.store.persist()

        self._logger.debug(
            f"Published '{payload.relative_path}' -> {result.note.note_id}: {result.outcome.name}"
        )

        return result

    def unpublish_note(self, note_path: Path) -> Path:
        """
        Delete the remote note of a published document and forget the
        mapping, returning the document's absolute path.
        """
        path_info = self.workspace.get_path_info(note_path)

        record = self.store.find_by_path(path_info.relative_path)
        if record is None:
            raise NotPublishedError(str(note_path))

        self.gateway.delete_note(record.remote_id)

        self.store.remove_by_path(path_info.relative_path)
        self.store.persist()

        return path_info.absolute_path

    def _resolve_group(self, name: str) -> RemoteGroup:
        """
        Get group by exact name, creating it if it doesn't exist.
        """
        group = self._groups.get(name)

        if group is None:
            group = next(
                (g for g in self.gateway.list_groups() if g.name == name),
                None,
            )

            if group is None:
                group = self.gateway.create_group(name)

            self._groups[name] = group

        return group

    def _save_payload(self, payload: NotePayload) -> PublishResult:
        """
        Update the mapped note, or create one if there's no mapping or the
        mapped note no longer exists.
        """
        path = payload.relative_path
        record = self.store.find_by_path(path)

        if record is not None:
            updated_note = self._try_update(record.remote_id, payload)

            if updated_note is not None:
                return self._finalize(PublishOutcome.UPDATED, updated_note, payload)

            self._logger.debug(
                f"Remote note {record.remote_id} for '{path}' not found, recreating"
            )

        created_note = self.gateway.create_note(payload)

        if record is not None:
            self.store.update_by_path(path, remote_id=created_note.note_id)
            outcome = PublishOutcome.REPAIRED
        else:
            self.store.insert(path, created_note.note_id)
            outcome = PublishOutcome.CREATED

        return self._finalize(outcome, created_note, payload)

    def _try_update(
        self, note_id: str, payload: NotePayload
    ) -> RemoteNote | None:
        """
        Update note, returning `None` if it no longer exists.
        """
        try:
            return self.gateway.update_note(note_id, payload)
        except NoteNotFoundError:
            return None

    def _finalize(
        self, outcome: PublishOutcome, note: RemoteNote, payload: NotePayload
    ) -> PublishResult:
        note.absolute_path = payload.absolute_path
        return PublishResult(
            outcome=outcome, note=note, relative_path=payload.relative_path
        )
