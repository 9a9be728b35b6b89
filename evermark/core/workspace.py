"""
Layout of a workspace on the local filesystem.

A workspace is rooted at the folder containing its configuration file:

```
evermark.yaml       configuration and root marker
evermark-db.yaml    mapping store
notes/              documents created by `evermark new`
```

Documents may live anywhere, but are keyed in the mapping store by their
path relative to the workspace root.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from logging import Logger
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import Config
from .exceptions import ConfigError, WorkspaceNotFoundError
from .metadata import DEFAULT_TITLE

__all__ = [
    "CONFIG_FILENAME",
    "STORE_FILENAME",
    "NOTES_DIRNAME",
    "NotePathInfo",
    "Workspace",
]

CONFIG_FILENAME = "evermark.yaml"
STORE_FILENAME = "evermark-db.yaml"
NOTES_DIRNAME = "notes"
NOTE_SUFFIX = ".md"


@dataclass(frozen=True, kw_only=True)
class NotePathInfo:
    absolute_path: Path
    relative_path: str
    """
    Path relative to workspace root, using `/` as separator.
    """


class Workspace:
    """
    Locates the files belonging to a workspace.
    """

    _root: Path
    _logger: Logger

    def __init__(self, root: Path, *, logger: Logger | None = None):
        self._root = root.resolve()
        self._logger = logger or logging.getLogger("evermark")

    @classmethod
    def find(cls, work_dir: Path, *, logger: Logger | None = None) -> Workspace:
        """
        Find the workspace containing `work_dir` by walking up to the first
        folder containing a configuration file.
        """
        start = work_dir.resolve()

        for folder in [start, *start.parents]:
            if (folder / CONFIG_FILENAME).is_file():
                return cls(folder, logger=logger)

        raise WorkspaceNotFoundError(
            f"No {CONFIG_FILENAME} found in '{start}' or any parent folder"
        )

    @classmethod
    def init(
        cls, root: Path, config: Config, *, logger: Logger | None = None
    ) -> Workspace:
        """
        Create a new workspace, writing its configuration.
        """
        root.mkdir(parents=True, exist_ok=True)

        workspace = cls(root, logger=logger)
        config.dump_yaml(workspace.config_path)
        workspace.notes_dir.mkdir(exist_ok=True)

        return workspace

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self._root / CONFIG_FILENAME

    @property
    def store_path(self) -> Path:
        return self._root / STORE_FILENAME

    @property
    def notes_dir(self) -> Path:
        return self._root / NOTES_DIRNAME

    def load_config(self) -> Config:
        try:
            return Config.load_yaml(self.config_path)
        except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
            raise ConfigError(
                f"Failed to load config file '{self.config_path}': {e}"
            ) from e

    def get_path_info(self, note_path: Path) -> NotePathInfo:
        """
        Get absolute path of a document and its path relative to the
        workspace root. Relative paths are resolved from the current
        working directory.
        """
        absolute_path = note_path.resolve()
        relative_path = Path(
            os.path.relpath(absolute_path, self._root)
        ).as_posix()

        self._logger.debug(f"absolute note path: {absolute_path}")
        self._logger.debug(f"relative note path: {relative_path}")

        return NotePathInfo(
            absolute_path=absolute_path, relative_path=relative_path
        )

    def create_note_file(self, title: str) -> Path:
        """
        Create a document with a single heading under the notes folder,
        returning its path. The filename is derived from the title and
        made unique if needed.
        """
        filename = re.sub(r"[/\\-]+", "-", title)
        filename = re.sub(r"^-", "", filename) or DEFAULT_TITLE

        self.notes_dir.mkdir(parents=True, exist_ok=True)

        note_path = _unique_path(self.notes_dir / f"{filename}{NOTE_SUFFIX}")
        note_path.write_text(f"# {title}\n", encoding="utf-8")

        return note_path


def _unique_path(path: Path) -> Path:
    """
    Get path which doesn't exist yet by appending `-1`, `-2`, ... to the stem.
    """
    candidate = path
    index = 0

    while candidate.exists():
        index += 1
        candidate = path.with_name(f"{path.stem}-{index}{path.suffix}")

    return candidate
