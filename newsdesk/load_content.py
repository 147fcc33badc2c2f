from __future__ import annotations

import math
import os
import re
import logging
from typing import List, Optional

from .content_index import DOC_EXT, normalize_locale, read_text
from .documents import split_document
from .errors import ContentNotFoundError
from .metrics import news_article_load_total
from .models import LoadedContent, ReadingTime
from .settings import settings

logger = logging.getLogger(__name__)

_SEPARATORS = tuple(s for s in (os.sep, os.altsep, "/") if s)
_WORD_RE = re.compile(r"\S+")


def is_plain_segment(name: str) -> bool:
    """A single file or directory name: non-empty, not hidden, no separators or NUL."""
    if not name or name.startswith(".") or "\x00" in name:
        return False
    return not any(s in name for s in _SEPARATORS)


def reading_time(text: str, words_per_minute: Optional[int] = None) -> ReadingTime:
    """Words-per-minute estimate; never shrinks as the word count grows."""
    wpm = max(1, int(words_per_minute or settings.words_per_minute))
    words = len(_WORD_RE.findall(text or ""))
    minutes = words / wpm
    return ReadingTime(
        words=words,
        minutes=minutes,
        time=round(minutes * 60_000),
        text=f"{math.ceil(round(minutes, 2))} min read",
    )


def parse_mdx(content: str, words_per_minute: Optional[int] = None) -> dict:
    """Split a document and time its body. Returns {frontmatter, reading_time, body}."""
    frontmatter, body, warnings = split_document(content)
    for w in warnings:
        logger.warning(f"Metadata: {w}")
    return {
        "frontmatter": frontmatter,
        "reading_time": reading_time(body, words_per_minute),
        "body": body,
    }


def candidate_locales(locale: str, default_locale: Optional[str] = None) -> List[str]:
    """Requested locale, then its base language, then the default. Duplicates removed."""
    default_locale = default_locale or settings.default_locale
    out: List[str] = []
    for loc in (locale, normalize_locale(locale), default_locale):
        if loc and loc not in out:
            out.append(loc)
    return out


def document_path(root: str, locale: str, slug: str) -> str:
    """<root>/<locale>/<slug>.mdx, or the entry whose extension differs only in case."""
    fp = os.path.join(root, locale, f"{slug}{DOC_EXT}")
    if os.path.exists(fp):
        return fp
    try:
        names = os.listdir(os.path.join(root, locale))
    except OSError:
        return fp
    for name in names:
        stem, ext = os.path.splitext(name)
        if stem == slug and ext.lower() == DOC_EXT:
            return os.path.join(root, locale, name)
    return fp


def load_localized_content(slug: str, locale: str, root: Optional[str] = None) -> LoadedContent:
    """
    Load <root>/<locale>/<slug>.mdx, falling back through candidate_locales().

    A missing or unreadable file moves on to the next candidate.

    Raises:
        ContentNotFoundError: No candidate locale has a readable document.
    """
    root = root or settings.content_root
    if not is_plain_segment(slug):
        news_article_load_total.labels(outcome="not_found").inc()
        raise ContentNotFoundError(slug, locale)

    for i, loc in enumerate(candidate_locales(locale)):
        if not is_plain_segment(loc):
            continue
        fp = document_path(root, loc, slug)
        try:
            raw = read_text(fp)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"No readable {fp}: {e}")
            continue

        news_article_load_total.labels(outcome="ok" if i == 0 else "fallback").inc()
        if i > 0:
            logger.info(f"Serving '{slug}' from locale '{loc}' for request locale '{locale}'")
        return LoadedContent(locale=loc, **parse_mdx(raw))

    news_article_load_total.labels(outcome="not_found").inc()
    raise ContentNotFoundError(slug, locale)
