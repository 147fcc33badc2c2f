import os
import logging
import threading
from typing import Dict, List, Optional, Sequence

from .documents import parse_article_metadata, parse_date, split_document
from .models import ArticleRecord, ArticleStatus, TopicMatchMode
from .settings import settings
from .metrics import (
    news_index_scans_total,
    news_index_documents,
    news_index_skipped_files_total,
    news_metadata_warnings_total,
    news_index_cache_total,
    news_index_invalidations_total,
)

logger = logging.getLogger(__name__)

NEWS_INDEX_TAG = "news-index"
DOC_EXT = ".mdx"

_cache: Dict[str, List[ArticleRecord]] = {}
_cache_lock = threading.Lock()

def read_text(path: str) -> str:
    """Read a whole document as UTF-8."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def _list_dir(path: str) -> List[str]:
    # sorted so that rescans of an unchanged tree come back in the same order
    return sorted(os.listdir(path))

def index_file(fp: str, locale: str) -> Optional[ArticleRecord]:
    """
    Build the record for a single document, or None when the file is skipped.

    Args:
        fp (str): Path to the .mdx file.
        locale (str): Language directory name.
    Returns:
        Optional[ArticleRecord]: Fully-defaulted record; metadata problems are logged, not raised.
    """
    try:
        file_size = os.path.getsize(fp)
    except OSError as e:
        logger.warning(f"Could not stat file {fp}: {e}")
        news_index_skipped_files_total.labels(reason="unreadable").inc()
        return None

    if file_size > settings.max_file_size:
        logger.warning(f"Skipping {fp}: file too large ({file_size} bytes)")
        news_index_skipped_files_total.labels(reason="too_large").inc()
        return None

    try:
        raw = read_text(fp)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {fp}: {e}")
        news_index_skipped_files_total.labels(reason="unreadable").inc()
        return None

    metadata, _, split_warnings = split_document(raw)
    slug_from_filename = os.path.basename(fp)[: -len(DOC_EXT)]
    record, field_warnings = parse_article_metadata(
        metadata, slug_from_filename=slug_from_filename, locale=locale, path=fp
    )

    warnings = split_warnings + field_warnings
    if warnings:
        news_metadata_warnings_total.inc(len(warnings))
        logger.info(f"{fp}: metadata defaulted ({'; '.join(warnings)})")
    return record

def scan_news_directory(root: Optional[str] = None) -> List[ArticleRecord]:
    """
    Scan <root>/<locale>/*.mdx and return records sorted newest first.

    The immediate subdirectories of root are the locales; nested directories
    below a locale are not visited. An unreadable root is an empty index.

    Args:
        root (Optional[str]): Content root. Defaults to settings.content_root.
    Returns:
        List[ArticleRecord]: Sorted by descending date (see sort_by_date_desc).
    """
    root = root or settings.content_root
    news_index_scans_total.inc()

    try:
        locales = [d for d in _list_dir(root) if os.path.isdir(os.path.join(root, d))]
    except OSError as e:
        logger.warning(f"Content root {root} is not readable: {e}")
        news_index_documents.observe(0)
        return []

    items: List[ArticleRecord] = []
    for locale in locales:
        locale_dir = os.path.join(root, locale)
        try:
            names = _list_dir(locale_dir)
        except OSError as e:
            logger.warning(f"Skipping locale {locale}: {e}")
            news_index_skipped_files_total.labels(reason="unreadable_dir").inc()
            continue

        for name in names:
            fp = os.path.join(locale_dir, name)
            if name.startswith(".") or not name.lower().endswith(DOC_EXT) or not os.path.isfile(fp):
                continue
            record = index_file(fp, locale)
            if record is not None:
                items.append(record)

    items = sort_by_date_desc(items)
    news_index_documents.observe(len(items))
    logger.info(f"Indexed {len(items)} documents across {len(locales)} locales under {root}")
    return items

def sort_by_date_desc(items: Sequence[ArticleRecord]) -> List[ArticleRecord]:
    """
    Newest first. Records whose date does not parse go after every dated
    record, in their input order (sorted() is stable).
    """
    def key(it: ArticleRecord):
        ts = parse_date(it.date)
        return (1, 0.0) if ts is None else (0, -ts)
    return sorted(items, key=key)

# ------------------------------------------------------------------------------
# Cached accessor
# ------------------------------------------------------------------------------

def get_news_index(root: Optional[str] = None) -> List[ArticleRecord]:
    """
    Return the index. Production serves a cached copy under NEWS_INDEX_TAG
    until revalidate_news_index() is called; other environments rescan every time.
    """
    if not settings.is_production:
        news_index_cache_total.labels(result="bypass").inc()
        return scan_news_directory(root)

    key = f"{NEWS_INDEX_TAG}:{os.path.abspath(root or settings.content_root)}"
    with _cache_lock:
        cached = _cache.get(key)
        if cached is not None:
            news_index_cache_total.labels(result="hit").inc()
            return list(cached)
        news_index_cache_total.labels(result="miss").inc()
        items = scan_news_directory(root)
        _cache[key] = items
        return list(items)

def revalidate_tag(tag: str) -> int:
    """Drop every cached entry stored under `tag`. Returns how many were dropped."""
    prefix = f"{tag}:"
    with _cache_lock:
        stale = [k for k in _cache if k.startswith(prefix)]
        for k in stale:
            del _cache[k]
    news_index_invalidations_total.labels(tag=tag).inc()
    logger.info(f"Revalidated tag {tag}: dropped {len(stale)} cached index(es)")
    return len(stale)

def revalidate_news_index() -> int:
    return revalidate_tag(NEWS_INDEX_TAG)

# ------------------------------------------------------------------------------
# Filters
# ------------------------------------------------------------------------------

def normalize_locale(locale: str) -> str:
    """'pt-BR' -> 'pt'."""
    return (locale or "").lower().replace("_", "-").split("-")[0]

def filter_by_audience(items: Sequence[ArticleRecord], audience: str) -> List[ArticleRecord]:
    return [it for it in items if audience in it.audiences]

def filter_by_section(items: Sequence[ArticleRecord], section: str) -> List[ArticleRecord]:
    return [it for it in items if it.section == section]

def filter_by_topics(
    items: Sequence[ArticleRecord],
    topics: Sequence[str],
    mode: TopicMatchMode = "any",
) -> List[ArticleRecord]:
    """`any`: at least one requested topic present; `all`: every one. Empty topics is a no-op."""
    if not topics:
        return list(items)
    wanted = set(topics)
    if mode == "all":
        return [it for it in items if wanted <= set(it.topics)]
    return [it for it in items if wanted & set(it.topics)]

def filter_by_status(items: Sequence[ArticleRecord], status: ArticleStatus) -> List[ArticleRecord]:
    return [it for it in items if it.status == status]

def filter_articles(
    items: Sequence[ArticleRecord],
    audience: Optional[str] = None,
    section: Optional[str] = None,
    topics: Optional[Sequence[str]] = None,
    topic_mode: TopicMatchMode = "any",
    status: Optional[ArticleStatus] = None,
) -> List[ArticleRecord]:
    """Apply audience -> section -> topics -> status, skipping absent arguments."""
    out = list(items)
    if audience:
        out = filter_by_audience(out, audience)
    if section:
        out = filter_by_section(out, section)
    if topics:
        out = filter_by_topics(out, topics, topic_mode)
    if status:
        out = filter_by_status(out, status)
    return out
