"""HTML sanitization for rendered post content.

Filters HTML against an explicit allow-list so the result can be injected
into a browser DOM verbatim:

- only the structural and formatting tags blog content needs survive;
  anything else is stripped and its text kept (escaped)
- only the attributes listed per tag survive; event handlers and ``style``
  are never allowed
- ``href``/``src`` must be http, https, mailto or relative; any other scheme
  (``javascript:``, ``data:``, ...) removes the attribute
- comments are removed

Sanitizing already-sanitized output returns it unchanged.
"""

import logging
import re

import bleach

logger = logging.getLogger(__name__)

ALLOWED_TAGS = frozenset(
    {
        # Blocks
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "pre",
        "hr",
        "br",
        # Lists
        "ul",
        "ol",
        "li",
        # Inline formatting
        "strong",
        "b",
        "em",
        "i",
        "del",
        "s",
        "code",
        # Links and images
        "a",
        "img",
        # Tables
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
    }
)

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
    "code": ["class"],
    "th": ["align"],
    "td": ["align"],
    "ol": ["start"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

_CODE_CLASS_RE = re.compile(r"^language-[A-Za-z0-9_+#.-]+$")
_CELL_ALIGNMENTS = frozenset({"left", "center", "right"})

# Upper bound on bleach passes while waiting for the output to stop changing
MAX_CLEAN_PASSES = 4


def _allow_attribute(tag: str, name: str, value: str) -> bool:
    """Attribute filter: the per-tag allow-list plus value checks.

    URL schemes are checked separately by bleach against ALLOWED_PROTOCOLS.
    """
    if name not in ALLOWED_ATTRIBUTES.get(tag, ()):
        return False
    if tag == "code" and name == "class":
        return bool(_CODE_CLASS_RE.match(value))
    if name == "align":
        return value in _CELL_ALIGNMENTS
    if tag == "ol" and name == "start":
        return value.isdigit()
    return True


def _clean(html: str) -> str:
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=_allow_attribute,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def sanitize(html: str) -> str:
    """Return *html* reduced to the allow-listed structure.

    One cleaning pass is not always a fixed point: html5lib repairs broken
    table and anchor nesting differently once stripped tags are gone. The
    input is cleaned repeatedly until the output stops changing, so the
    result is well formed and sanitizing it again returns it unchanged.

    Never raises: if cleaning fails, or has not settled after
    MAX_CLEAN_PASSES passes, the problem is logged and an empty string is
    returned rather than anything unsanitized.
    """
    try:
        cleaned = _clean(html)
        for _ in range(MAX_CLEAN_PASSES - 1):
            again = _clean(cleaned)
            if again == cleaned:
                return cleaned
            cleaned = again
    except Exception:
        logger.error("HTML sanitization failed, dropping content", exc_info=True)
        return ""

    logger.warning(
        "HTML sanitization did not settle after %d passes, dropping content",
        MAX_CLEAN_PASSES,
    )
    return ""
