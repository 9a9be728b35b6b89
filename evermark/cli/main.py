"""
Entry point of `evermark` CLI.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

import dotenv
from click.exceptions import BadParameter, MissingParameter
from pydantic import ValidationError
from typer import Argument, Context, Exit, Option

from ..core import (
    CONFIG_FILENAME,
    Config,
    Evermark,
    EvermarkError,
    PublishOutcome,
    Workspace,
)
from ._utils import MainTyper, get_root_context, logger, lookup_param

dotenv.load_dotenv()

app = MainTyper(
    "evermark",
    help="Publish markdown documents as Trilium notes",
)

OUTCOME_VERBS = {
    PublishOutcome.CREATED: "Created",
    PublishOutcome.UPDATED: "Updated",
    PublishOutcome.REPAIRED: "Recreated",
}


@dataclass(kw_only=True)
class RootContext:
    ctx: Context
    work_dir: Path
    evermark: Evermark


@app.callback()
def main(
    ctx: Context,
    work_dir: Path = Option(
        Path("."),
        "--work-dir",
        help=f"Folder within the workspace, i.e. at or below the folder containing {CONFIG_FILENAME}",
        file_okay=False,
    ),
    verbose: bool = Option(
        False,
        "-v",
        "--verbose",
        help="Enable debug logging",
    ),
):
    # Load environment variables from .env file if it exists
    dotenv.load_dotenv(Path(".env").resolve(), override=True)

    if verbose:
        logger.setLevel(logging.DEBUG)

    ctx.obj = RootContext(
        ctx=ctx,
        work_dir=work_dir,
        evermark=Evermark(work_dir, logger=logger),
    )


@app.command()
def init(
    ctx: Context,
    host: str
    | None = Option(
        None,
        help="Trilium host, e.g. http://localhost:8080",
        envvar="TRILIUM_HOST",
    ),
    token: str
    | None = Option(
        None,
        help="ETAPI token",
        envvar="TRILIUM_TOKEN",
    ),
    password: str
    | None = Option(
        None,
        help="Trilium password, used if no token provided",
        envvar="TRILIUM_PASSWORD",
    ),
    parent_note_id: str = Option(
        "root",
        help="Note under which to create groups and notes",
    ),
    force: bool = Option(
        False,
        "--force",
        help=f"Overwrite existing {CONFIG_FILENAME}",
    ),
):
    """
    Create a workspace in the working folder
    """
    root_context = get_root_context(ctx)
    config_path = root_context.work_dir / CONFIG_FILENAME

    if not host:
        raise MissingParameter(
            message="--host must be provided or TRILIUM_HOST must be set",
            ctx=ctx,
            param=lookup_param(ctx, "host"),
        )

    if config_path.exists() and not force:
        raise BadParameter(
            f"workspace already exists: '{config_path}', pass --force to overwrite",
            ctx=ctx,
            param=lookup_param(ctx, "force"),
        )

    try:
        config = Config(
            host=host,
            token=token,
            password=password,
            parent_note_id=parent_note_id,
        )
    except ValidationError as e:
        raise BadParameter(
            f"invalid configuration: {e}",
            ctx=ctx,
            param=lookup_param(ctx, "token"),
        )

    workspace = Workspace.init(root_context.work_dir, config, logger=logger)
    logger.info(f"Created workspace: '{workspace.root}'")


@app.command()
def new(
    ctx: Context,
    title: str = Argument(..., help="Title of document"),
):
    """
    Create a new document in the workspace
    """
    evermark = get_root_context(ctx).evermark

    with _handle_errors():
        note_path = evermark.create_local_note(title)

    logger.info(f"Created document: '{note_path}'")


@app.command()
def publish(
    ctx: Context,
    paths: list[Path] = Argument(
        ..., help="Documents to publish", exists=True, dir_okay=False
    ),
):
    """
    Publish documents, creating or updating their notes
    """
    evermark = get_root_context(ctx).evermark

    for path in paths:
        with _handle_errors():
            result = evermark.publish_note(path)

        logger.info(
            f"{OUTCOME_VERBS[result.outcome]} note '{result.note.title}' ({result.note.note_id}) from '{result.relative_path}'"
        )


@app.command()
def unpublish(
    ctx: Context,
    paths: list[Path] = Argument(..., help="Documents to unpublish"),
):
    """
    Delete notes of published documents
    """
    evermark = get_root_context(ctx).evermark

    for path in paths:
        with _handle_errors():
            absolute_path = evermark.unpublish_note(path)

        logger.info(f"Unpublished '{absolute_path}'")


@contextmanager
def _handle_errors() -> Generator[None, None, None]:
    """
    Log typed failures and exit with an error code.
    """
    try:
        yield
    except EvermarkError as e:
        logger.error(f"{e} ({e.kind.name})")
        raise Exit(code=1)


def run():
    app()


if __name__ == "__main__":
    app()
