"""Markdown content pipeline: render, then sanitize."""

from blog_api.services.html_sanitizer import sanitize
from blog_api.services.markdown_renderer import render


def process_content(markdown: str) -> str:
    """Convert untrusted Markdown into HTML that is safe to serve verbatim.

    Pure and deterministic; runs on every create/update and never on read.
    """
    return sanitize(render(markdown))
