"""Markdown to HTML rendering.

Uses markdown-it-py with the GitHub-flavored preset (tables, strikethrough,
bare-URL autolinks, raw HTML passthrough) and hard line breaks, so a single
newline inside a paragraph renders as ``<br>``.

The output is NOT safe to serve: raw HTML in the source survives rendering.
Always pass it through ``html_sanitizer.sanitize`` before storing it.
"""

import html
import logging

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)


def _render_table_cell(self, tokens, idx, options, env):
    """Emit column alignment as an ``align`` attribute instead of inline CSS.

    The sanitizer drops ``style`` everywhere, so ``style="text-align:right"``
    would otherwise lose the alignment.
    """
    token = tokens[idx]
    style = token.attrGet("style")
    if isinstance(style, str) and style.startswith("text-align:"):
        del token.attrs["style"]
        token.attrSet("align", style.split(":", 1)[1])
    return self.renderToken(tokens, idx, options, env)


def _build_renderer() -> MarkdownIt:
    md = MarkdownIt("gfm-like", {"breaks": True, "typographer": False})
    md.add_render_rule("th_open", _render_table_cell)
    md.add_render_rule("td_open", _render_table_cell)
    return md


# Configured once at import; rendering never mutates it.
_renderer = _build_renderer()


def _fallback_html(markdown: str) -> str:
    escaped = html.escape(markdown).replace("\n", "<br />\n")
    return f"<p>{escaped}</p>\n"


def render(markdown: str) -> str:
    """Render Markdown to an HTML fragment.

    Never raises. If the parser fails on some input, the text is returned
    HTML-escaped in a single paragraph.
    """
    try:
        return _renderer.render(markdown)
    except Exception:
        logger.error(
            "Markdown rendering failed (%d chars), falling back to escaped text",
            len(markdown),
            exc_info=True,
        )
        return _fallback_html(markdown)
