"""
Extraction of note metadata from a parsed markdown token stream.

A document is titled by its first heading. It may also contain a directive
on a line by itself which selects the group the note is filed in and the
labels attached to it:

```
@(Work)[urgent|review]
```

The label segment is optional.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from markdown_it.token import Token

__all__ = [
    "DEFAULT_TITLE",
    "NoteInfo",
    "parse_note_info",
]

DEFAULT_TITLE = "untitled"
"""
Title used for documents without a heading.
"""

DIRECTIVE_PATTERN = re.compile(r" *@\((.+)\)(?:\[(.*)\])?")
"""
Pattern for a group/label directive, matched against the full raw content
of a token.
"""


@dataclass(frozen=True, kw_only=True)
class NoteInfo:
    """
    Metadata derived from a document.
    """

    title: str
    group_name: str | None = None
    label_names: list[str] | None = None


def parse_note_info(tokens: Iterable[Token] | None = None) -> NoteInfo:
    """
    Derive title, group name and label names from tokens. Absent or malformed
    metadata yields defaults rather than an error.
    """
    token_list = list(tokens or [])

    group_name, label_names = _parse_directive(token_list)

    return NoteInfo(
        title=_parse_title(token_list),
        group_name=group_name,
        label_names=label_names,
    )


def _parse_title(tokens: list[Token]) -> str:
    index = next(
        (i for i, t in enumerate(tokens) if t.type == "heading_open"), None
    )

    if index is None or index + 1 >= len(tokens):
        return DEFAULT_TITLE

    return tokens[index + 1].content or DEFAULT_TITLE


def _parse_directive(
    tokens: list[Token],
) -> tuple[str | None, list[str] | None]:
    # only prose is considered, not code blocks or raw html
    for token in (t for t in tokens if t.type == "inline"):
        match = DIRECTIVE_PATTERN.fullmatch(token.content)
        if match is None:
            continue

        group_name, labels = match.group(1), match.group(2)
        return group_name, _split_labels(labels)

    return None, None


def _split_labels(labels: str | None) -> list[str] | None:
    if labels is None:
        return None

    names = [s.strip() for s in labels.split("|")]
    names = [s for s in names if s]

    return names or None
