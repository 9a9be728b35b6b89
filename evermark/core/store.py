"""
Persistent mapping of local documents to remote notes.

The store is a single .yaml file per workspace, loaded once and kept in
memory. Changes are only written back by {obj}`MappingStore.persist`; if
another process writes the file in between, the last writer wins.
"""
from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_serializer

from .exceptions import StoreIOError
from .yaml_model import BaseYamlModel

__all__ = [
    "MappingRecord",
    "MappingStore",
]


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class MappingRecord(BaseModel):
    """
    Link between a local document and the remote note it was published to.
    """

    path: str
    """
    Path of document relative to workspace root; unique key.
    """

    remote_id: str
    """
    Id of remote note.
    """

    created_at: datetime.datetime = Field(default_factory=_utcnow)
    """
    When the record was first inserted; kept when the remote id is repaired.
    """

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime.datetime) -> str:
        return value.isoformat()


class StoreModel(BaseYamlModel):
    """
    Contents of the store file.
    """

    notes: list[MappingRecord] = []


class MappingStore:
    """
    Keyed record store of {obj}`MappingRecord` objects.
    """

    _file: Path
    """
    Backing file.
    """

    _records: dict[str, MappingRecord]
    """
    Mapping of relative path to record, in insertion order.
    """

    def __init__(self, file: Path, records: list[MappingRecord] | None = None):
        self._file = file
        self._records = {}

        for record in records or []:
            if record.path in self._records:
                raise StoreIOError(
                    f"Duplicate record for path '{record.path}' in '{file}'"
                )
            self._records[record.path] = record

    @classmethod
    def load(cls, file: Path) -> MappingStore:
        """
        Load store from file; a nonexistent file yields an empty store.
        """
        if not file.exists():
            return cls(file)

        try:
            model = StoreModel.load_yaml(file)
        except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
            raise StoreIOError(
                f"Failed to load mapping store '{file}': {e}"
            ) from e

        return cls(file, model.notes)

    @property
    def file(self) -> Path:
        return self._file

    @property
    def records(self) -> list[MappingRecord]:
        """
        Copy of all records.
        """
        return list(self._records.values())

    def find_by_path(self, path: str) -> MappingRecord | None:
        return self._records.get(path)

    def insert(self, path: str, remote_id: str) -> MappingRecord:
        """
        Add a new record.

        :raises ValueError: A record already exists for this path
        """
        if path in self._records:
            raise ValueError(f"Record already exists for path '{path}'")

        record = MappingRecord(path=path, remote_id=remote_id)
        self._records[path] = record

        return record

    def update_by_path(self, path: str, **fields: Any) -> MappingRecord:
        """
        Update fields of an existing record in place. The path itself
        can't be changed.

        :raises ValueError: No record exists for this path, or `path` is
            among the fields
        """
        record = self._records.get(path)
        if record is None:
            raise ValueError(f"No record exists for path '{path}'")

        if "path" in fields:
            raise ValueError(f"Record path is immutable: '{path}'")

        record_new = record.model_copy(update=fields)
        self._records[path] = record_new

        return record_new

    def remove_by_path(self, path: str) -> bool:
        """
        Remove record, returning whether it existed.
        """
        return self._records.pop(path, None) is not None

    def persist(self):
        """
        Write all records to the backing file.
        """
        model = StoreModel(notes=self.records)

        try:
            model.dump_yaml(self._file)
        except OSError as e:
            raise StoreIOError(
                f"Failed to write mapping store '{self._file}': {e}"
            ) from e
