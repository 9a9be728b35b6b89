"""
Gateway to a Trilium server via ETAPI.

Groups are `book` notes labeled `#evermarkGroup` under a configurable parent
note. Published notes are `text` notes placed under their group, or directly
under the parent note if they have none. Labels are stored as `#tag=<name>`.
"""
from __future__ import annotations

import json
import logging
from logging import Logger
from typing import cast

import requests
from trilium_client import ApiClient, Configuration, DefaultApi
from trilium_client.exceptions import ApiException, NotFoundException
from trilium_client.models.app_info import AppInfo
from trilium_client.models.attribute import Attribute as EtapiAttributeModel
from trilium_client.models.branch import Branch as EtapiBranchModel
from trilium_client.models.create_note_def import CreateNoteDef
from trilium_client.models.login201_response import Login201Response
from trilium_client.models.login_request import LoginRequest
from trilium_client.models.note import Note as EtapiNoteModel
from trilium_client.models.note_with_branch import NoteWithBranch
from trilium_client.models.search_response import SearchResponse

from .exceptions import (
    ConnectError,
    GroupCreateError,
    NoteCreateError,
    NoteDeleteError,
    NoteNotFoundError,
    NoteUpdateError,
)
from .gateway import BaseGateway, NotePayload, RemoteGroup, RemoteNote

__all__ = [
    "EtapiGateway",
]

REQUEST_TIMEOUT = 10.0
"""
Timeout for initial request to get app info.
"""

GROUP_LABEL = "evermarkGroup"
TAG_LABEL = "tag"
SOURCE_LABEL = "sourceApplication"
READ_ONLY_LABEL = "readOnly"

MANAGED_LABELS = {TAG_LABEL, SOURCE_LABEL, READ_ONLY_LABEL}
"""
Labels owned by a published note which are maintained by this gateway;
any others are left alone.
"""


class EtapiGateway(BaseGateway):
    """
    Manages notes and groups in a Trilium instance.
    """

    _api: DefaultApi
    """
    ETAPI client object.
    """

    _parent_note_id: str
    """
    Note under which groups and ungrouped notes are created.
    """

    _logger: Logger

    def __init__(
        self,
        api: DefaultApi,
        *,
        parent_note_id: str = "root",
        logger: Logger | None = None,
    ):
        """
        :param api: ETAPI client object
        :param parent_note_id: Note under which to create groups and ungrouped notes
        :param logger: Logger to use, or `None` to use default logger
        """
        self._api = api
        self._parent_note_id = parent_note_id
        self._logger = logger or logging.getLogger("evermark")

    @classmethod
    def connect(
        cls,
        host: str,
        token: str | None = None,
        *,
        password: str | None = None,
        parent_note_id: str = "root",
        logger: Logger | None = None,
    ) -> EtapiGateway:
        """
        Create gateway from connection info and verify the connection.
        Either `token` or `password` is required; if both are provided,
        `token` takes precedence.

        :param host: Hostname of Trilium server
        :param token: ETAPI token
        :param password: Trilium password, if no token provided
        """
        logger = logger or logging.getLogger("evermark")

        if token is None:
            assert (
                password is not None
            ), "Either token or password is required to connect to Trilium"
            token = cls.login(host, password)

        config = Configuration(
            host=f"{host}/etapi", api_key={"EtapiTokenAuth": token}
        )
        api = DefaultApi(ApiClient(config))

        try:
            app_info: AppInfo = api.get_app_info(
                _request_timeout=REQUEST_TIMEOUT
            )
        except Exception as e:
            raise ConnectError(
                f"Failed to connect to Trilium host='{host}': {_describe(e)}"
            ) from e

        logger.debug(
            f"Connected to Trilium host '{host}', version {app_info.app_version}"
        )

        return cls(api, parent_note_id=parent_note_id, logger=logger)

    @classmethod
    def login(cls, host: str, password: str) -> str:
        """
        Login using a password and get an ETAPI token.
        """
        request_model = LoginRequest(password=password)

        try:
            response: requests.models.Response = requests.post(
                f"{host}/etapi/auth/login",
                headers={"Content-Type": "application/json"},
                data=request_model.model_dump_json(),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ConnectError(
                f"Failed to login to Trilium host='{host}': {e}"
            ) from e

        if response.status_code != 201:
            raise ConnectError(
                f"Failed to login to Trilium host='{host}': status code {response.status_code}"
            )

        response_model = Login201Response.model_validate(
            json.loads(response.text)
        )

        assert isinstance(response_model.auth_token, str)
        return cast(str, response_model.auth_token)

    @property
    def api(self) -> DefaultApi:
        return self._api

    def list_groups(self) -> list[RemoteGroup]:
        try:
            response: SearchResponse = self._api.search_notes(
                f"#{GROUP_LABEL}",
                ancestor_note_id=self._parent_note_id,
            )
        except ApiException as e:
            raise GroupCreateError(
                f"Failed to list groups: {_describe(e)}"
            ) from e

        return [
            RemoteGroup(group_id=model.note_id, name=model.title)
            for model in response.results
        ]

    def create_group(self, name: str) -> RemoteGroup:
        try:
            response: NoteWithBranch = self._api.create_note(
                CreateNoteDef(
                    parent_note_id=self._parent_note_id,
                    title=name,
                    type="book",
                    content="",
                )
            )
        except ApiException as e:
            raise GroupCreateError(
                f"Failed to create group '{name}': {_describe(e)}"
            ) from e

        group_id = response.note.note_id

        try:
            self._post_label(group_id, GROUP_LABEL)
        except ApiException as e:
            # without its label the group wouldn't be found again
            self._discard(group_id)
            raise GroupCreateError(
                f"Failed to label group '{name}': {_describe(e)}"
            ) from e

        self._logger.debug(f"Created group '{name}': {group_id}")

        return RemoteGroup(group_id=group_id, name=name)

    def create_note(self, payload: NotePayload) -> RemoteNote:
        parent_note_id = payload.group_id or self._parent_note_id

        try:
            response: NoteWithBranch = self._api.create_note(
                CreateNoteDef(
                    parent_note_id=parent_note_id,
                    title=payload.title,
                    type="text",
                    content=payload.body,
                )
            )
        except ApiException as e:
            raise NoteCreateError(
                f"Failed to create note '{payload.title}': {_describe(e)}"
            ) from e

        note_id = response.note.note_id

        try:
            for name, value in _get_labels(payload):
                self._post_label(note_id, name, value)
        except ApiException as e:
            # no mapping record will refer to this note
            self._discard(note_id)
            raise NoteCreateError(
                f"Failed to label note '{payload.title}': {_describe(e)}"
            ) from e

        return _to_remote_note(note_id, payload, parent_note_id)

    def update_note(self, note_id: str, payload: NotePayload) -> RemoteNote:
        try:
            self._api.patch_note_by_id(
                note_id, EtapiNoteModel(title=payload.title)
            )
        except NotFoundException as e:
            raise NoteNotFoundError(note_id) from e
        except ApiException as e:
            raise NoteUpdateError(
                f"Failed to update note {note_id}: {_describe(e)}"
            ) from e

        try:
            self._api.put_note_content_by_id(note_id, payload.body)

            model: EtapiNoteModel = self._api.get_note_by_id(note_id)
            self._sync_labels(model, _get_labels(payload))

            if payload.group_id is not None:
                self._move_note(model, payload.group_id)
        except NotFoundException as e:
            # deleted concurrently after the title was patched
            raise NoteNotFoundError(note_id) from e
        except ApiException as e:
            raise NoteUpdateError(
                f"Failed to update note {note_id}: {_describe(e)}"
            ) from e

        group_id = payload.group_id
        if group_id is None and model.parent_note_ids:
            group_id = model.parent_note_ids[0]

        return _to_remote_note(note_id, payload, group_id)

    def delete_note(self, note_id: str):
        try:
            self._api.delete_note_by_id(note_id)
        except NotFoundException as e:
            raise NoteNotFoundError(note_id) from e
        except ApiException as e:
            raise NoteDeleteError(
                f"Failed to delete note {note_id}: {_describe(e)}"
            ) from e

    def _discard(self, note_id: str):
        """
        Delete a partially created note. Failure is logged, leaving the
        original error to be raised by the caller.
        """
        try:
            self._api.delete_note_by_id(note_id)
        except ApiException as e:
            self._logger.warning(
                f"Failed to delete partially created note {note_id}: {_describe(e)}"
            )
        else:
            self._logger.debug(f"Deleted partially created note {note_id}")

    def _post_label(self, note_id: str, name: str, value: str = ""):
        self._api.post_attribute(
            EtapiAttributeModel(
                note_id=note_id,
                type="label",
                name=name,
                value=value,
                is_inheritable=False,
            )
        )

    def _sync_labels(
        self, model: EtapiNoteModel, labels: list[tuple[str, str]]
    ):
        """
        Delete managed labels which are no longer wanted and add missing ones.
        """
        pending = list(labels)

        for attr in model.attributes or []:
            if not (
                attr.type == "label"
                and attr.note_id == model.note_id
                and attr.name in MANAGED_LABELS
            ):
                continue

            key = (attr.name, attr.value or "")
            if key in pending:
                pending.remove(key)
            else:
                self._api.delete_attribute_by_id(attr.attribute_id)

        for name, value in pending:
            self._post_label(model.note_id, name, value)

    def _move_note(self, model: EtapiNoteModel, group_id: str):
        """
        Place note under group, removing it from any other parents.
        """
        parent_note_ids = model.parent_note_ids or []

        if parent_note_ids == [group_id]:
            return

        if group_id not in parent_note_ids:
            self._api.post_branch(
                EtapiBranchModel(note_id=model.note_id, parent_note_id=group_id)
            )

        for branch_id in model.parent_branch_ids or []:
            branch: EtapiBranchModel = self._api.get_branch_by_id(branch_id)
            if branch.parent_note_id != group_id:
                self._api.delete_branch_by_id(branch_id)

        self._logger.debug(f"Moved note {model.note_id} to group {group_id}")


def _get_labels(payload: NotePayload) -> list[tuple[str, str]]:
    """
    Get managed labels as (name, value) pairs.
    """
    labels = [(SOURCE_LABEL, payload.source_application)]

    if payload.read_only:
        labels.append((READ_ONLY_LABEL, ""))

    for name in payload.label_names or []:
        labels.append((TAG_LABEL, name))

    return labels


def _to_remote_note(
    note_id: str, payload: NotePayload, group_id: str | None
) -> RemoteNote:
    return RemoteNote(
        note_id=note_id,
        title=payload.title,
        group_id=group_id,
        label_names=payload.label_names,
    )


def _describe(e: Exception) -> str:
    return (
        f"status={e.status}, reason={e.reason}"
        if isinstance(e, ApiException)
        else str(e)
    )
