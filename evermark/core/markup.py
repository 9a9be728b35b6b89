"""
Markdown parsing and HTML rendering.
"""
from __future__ import annotations

from typing import Any, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token

__all__ = [
    "MarkupRenderer",
]

DEFAULT_OPTIONS: dict[str, Any] = {
    "html": True,
}
"""
Options applied to the parser unless overridden.
"""


class MarkupRenderer:
    """
    Converts markdown documents to tokens and tokens to HTML suitable as
    note content.
    """

    _md: MarkdownIt

    def __init__(self, options: dict[str, Any] | None = None):
        """
        :param options: Parser options overriding defaults, e.g. `{"typographer": True}`
        """
        md = MarkdownIt("commonmark", {**DEFAULT_OPTIONS, **(options or {})})
        md.enable(["table", "strikethrough"])

        code_inline = md.renderer.rules["code_inline"]
        fence = md.renderer.rules["fence"]

        def render_code_inline(self, tokens, idx, options, env) -> str:
            tokens[idx].attrJoin("class", "inline")
            return code_inline(tokens, idx, options, env)

        def render_fence(self, tokens, idx, options, env) -> str:
            result = fence(tokens, idx, options, env)
            return result.replace("<pre>", '<pre class="hljs">', 1)

        md.add_render_rule("code_inline", render_code_inline)
        md.add_render_rule("fence", render_fence)

        self._md = md

    def parse(self, text: str) -> list[Token]:
        return self._md.parse(text, {})

    def render(self, tokens: Sequence[Token]) -> str:
        """
        Render tokens, wrapped in a `markdown-body` container.
        """
        html = self._md.renderer.render(tokens, self._md.options, {})
        return f'<div class="markdown-body">{html}</div>'
