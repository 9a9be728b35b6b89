"""
This module implements publishing of markdown documents to Trilium and the
bookkeeping needed to keep them in sync.
"""

from pyrollup import rollup

from . import (
    config,
    etapi,
    evermark,
    exceptions,
    gateway,
    markup,
    metadata,
    store,
    workspace,
)
from .config import *  # noqa
from .etapi import *  # noqa
from .evermark import *  # noqa
from .exceptions import *  # noqa
from .gateway import *  # noqa
from .markup import *  # noqa
from .metadata import *  # noqa
from .store import *  # noqa
from .workspace import *  # noqa

__all__ = rollup(
    evermark,
    store,
    metadata,
    gateway,
    etapi,
    markup,
    workspace,
    config,
    exceptions,
)

__canonical_children__ = [
    "evermark",
    "store",
    "metadata",
    "gateway",
    "etapi",
    "markup",
    "workspace",
    "config",
    "exceptions",
]
