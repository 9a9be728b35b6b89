"""
Interface to workspace configuration as persisted in .yaml file.
"""
from __future__ import annotations

from logging import Logger
from typing import TYPE_CHECKING, Any, Self

from pydantic import model_validator

from .yaml_model import BaseYamlModel

if TYPE_CHECKING:
    from .etapi import EtapiGateway

__all__ = [
    "Config",
]


class Config(BaseYamlModel):
    """
    Encapsulates configuration of a workspace.
    """

    host: str
    """
    Trilium host, e.g. `http://localhost:8080`.
    """

    token: str | None = None
    """
    ETAPI token.
    """

    password: str | None = None
    """
    Trilium password, used to login if no token is provided.
    """

    parent_note_id: str = "root"
    """
    Note under which groups and ungrouped notes are created.
    """

    markdown: dict[str, Any] = {}
    """
    Options passed through to the markdown parser, e.g. `typographer: true`.
    """

    @model_validator(mode="after")
    def validate_token_or_password(self) -> Self:
        if not (self.token or self.password):
            raise ValueError("either token or password must be provided")
        return self

    def create_gateway(self, *, logger: Logger | None = None) -> EtapiGateway:
        """
        Connect to the configured Trilium instance.
        """
        from .etapi import EtapiGateway

        return EtapiGateway.connect(
            self.host,
            token=self.token,
            password=self.password,
            parent_note_id=self.parent_note_id,
            logger=logger,
        )
