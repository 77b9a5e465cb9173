"""Page slugs derived from file names or titles"""

import re


_NON_WORD_RE = re.compile(r'[^\w\s-]')
_SEPARATOR_RE = re.compile(r'[\s_-]+')


def slugify(text: str, fallback: str = "page") -> str:
    """Lowercase, hyphen-separated URL-safe slug; fallback when nothing survives."""
    text = _NON_WORD_RE.sub('', text.lower())
    return _SEPARATOR_RE.sub('-', text).strip('-') or fallback
