"""Template classifier: decide whether a document is template-only, thin or filled.

Heuristics are deterministic and driven entirely by ``ClassificationRules``.
The checks run in a fixed order and stop at the first decisive one:

1. empty body
2. count bracketed ``<...>`` placeholders
3. strip the kind's known placeholders; nothing left means template-only
4. placeholder density, then meaningful length, then lingering placeholders
"""

from __future__ import annotations

import re
from typing import Iterable, Union

from .frontmatter import strip_frontmatter
from .models import Classification, DocumentKind, FillStatus
from .rules import DEFAULT_RULES, ClassificationRules

_BRACKETED = re.compile(r"<[^<>]{2,}>")
_URL = re.compile(r"^(?:https?|ftp)://", re.IGNORECASE)
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TAG_LIKE = re.compile(r"^/?(?P<name>[A-Za-z][\w-]*)(?:\s+[^>]*)?/?$")
_HTML_TAGS = frozenset(
    """
    a abbr b blockquote body br button canvas circle code dd defs details div dl dt em form g
    h1 h2 h3 h4 h5 h6 head hr html i iframe img input kbd label li line link meta ol option
    p path pre rect script select small source span strong style sub summary sup svg table
    tbody td textarea th thead tr u ul use video audio
    """.split()
)
_STARTS_LIKE_WORD = re.compile(r"^[A-Z][a-z]")


def normalize(text: str) -> str:
    """Convert CRLF/CR line endings to LF and trim."""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def _is_placeholder(token: str) -> bool:
    inner = token[1:-1].strip()
    if not inner:
        return False
    if inner.startswith("!"):
        # HTML comment or doctype
        return False
    if _URL.match(inner) or _EMAIL.match(inner):
        return False
    if inner.endswith("/"):
        return False
    tag = _TAG_LIKE.match(inner)
    if tag and tag.group("name").lower() in _HTML_TAGS:
        return False
    if re.search(r"[=:]", inner) and not _STARTS_LIKE_WORD.match(inner):
        return False
    return True


def count_unfilled_placeholders(text: str) -> int:
    """Count ``<...>`` tokens that look like unfilled template scaffolding.

    URLs, email addresses, HTML tags and comments, self-closing tags and
    code-like tokens containing ``=`` or ``:`` are not counted.
    """
    return sum(1 for token in _BRACKETED.findall(text) if _is_placeholder(token))


def strip_placeholders(text: str, placeholders: Iterable[str]) -> str:
    """Remove known placeholder strings, as whole lines and inline, then trim."""
    result = text
    for placeholder in placeholders:
        escaped = re.escape(placeholder)
        result = re.sub(rf"^[ \t]*{escaped}[ \t]*$", "", result, flags=re.MULTILINE | re.IGNORECASE)
        result = re.sub(escaped, "", result, flags=re.IGNORECASE)
    return result.strip()


def classify(
    kind: Union[DocumentKind, str],
    raw_text: str,
    rules: ClassificationRules = DEFAULT_RULES,
) -> Classification:
    """Classify a document's fill status from its raw text (frontmatter included)."""
    resolved = DocumentKind.coerce(kind)
    thresholds = rules.for_kind(resolved) if resolved is not None else None
    if thresholds is None:
        return Classification(FillStatus.FILLED, ("No template rules configured",))

    body = normalize(strip_frontmatter(raw_text))
    if not body:
        if thresholds.treat_empty_as_template:
            return Classification(FillStatus.TEMPLATE_ONLY, ("Body is empty",))
        return Classification(FillStatus.THIN, ("No meaningful content detected",))

    placeholder_count = count_unfilled_placeholders(body)

    stripped = strip_placeholders(body, thresholds.placeholders)
    if not stripped:
        return Classification(FillStatus.TEMPLATE_ONLY, ("Only template headings/placeholders present",))

    meaningful_length = len(stripped)

    if placeholder_count > rules.template_only_placeholder_limit:
        return Classification(
            FillStatus.TEMPLATE_ONLY,
            (f"{placeholder_count} unfilled placeholders remain",),
        )

    if meaningful_length < thresholds.min_meaningful:
        reasons = [f"Only {meaningful_length} chars of non-template content"]
        if placeholder_count > 0:
            reasons.append(f"{placeholder_count} unfilled placeholders")
        return Classification(FillStatus.THIN, tuple(reasons))

    if placeholder_count >= rules.thin_placeholder_minimum:
        return Classification(FillStatus.THIN, (f"{placeholder_count} unfilled placeholders remain",))

    return Classification(FillStatus.FILLED)
