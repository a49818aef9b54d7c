"""HTML sanitization for user-supplied snippet fields."""

import html

import bleach
from bleach.css_sanitizer import CSSSanitizer

# Snippet code may keep light formatting markup and nothing else
CODE_ALLOWED_TAGS = frozenset({"div", "span", "br"})
CODE_ALLOWED_ATTRIBUTES = {
    "*": ["class"],
    "div": ["class", "style"],
    "span": ["class", "style"],
}
CODE_ALLOWED_CSS_PROPERTIES = frozenset(
    {"color", "background-color", "font-weight", "font-style", "text-decoration"}
)

_css_sanitizer = CSSSanitizer(allowed_css_properties=CODE_ALLOWED_CSS_PROPERTIES)


def strip_markup(value: str) -> str:
    """Trim and remove every tag from a plain-text field.

    Text content of removed elements is kept exactly as typed: bleach's
    output escaping is undone, and ampersands are escaped beforehand so that
    entity-like text such as ``&lt;`` survives literally.
    """
    cleaned = bleach.clean(
        value.strip().replace("&", "&amp;"), tags=set(), attributes={}, strip=True
    )
    return html.unescape(cleaned).strip()


def purify_code(value: str) -> str:
    """Remove executable or unsafe markup from snippet code.

    Only ``div``, ``span`` and ``br`` survive, with ``class`` attributes and a
    ``style`` restricted to a few color/font properties.
    """
    return bleach.clean(
        value,
        tags=CODE_ALLOWED_TAGS,
        attributes=CODE_ALLOWED_ATTRIBUTES,
        css_sanitizer=_css_sanitizer,
        strip=True,
        strip_comments=True,
    )
