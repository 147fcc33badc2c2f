"""
Split MDX documents into metadata and body, and turn raw metadata into
fully-defaulted ArticleRecords.

Parsing is soft: a missing or malformed field never rejects a document. Each
field that had to be defaulted or dropped is reported as a warning string so
callers can log it instead of losing it.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dateutil import parser as date_parser
from frontmatter.default_handlers import YAMLHandler

from .models import ArticleRecord

_HANDLER = YAMLHandler()
_STATUSES = {"draft", "published", "archived"}
_REQUIRED = ("title", "description", "slug", "date")


def split_document(text: str) -> Tuple[Dict[str, Any], str, List[str]]:
    """
    Separate the leading `---` metadata block from the body.

    Returns:
        (metadata, body, warnings). Documents without a block return ({}, text, []).
    """
    text = text.lstrip("\ufeff")
    if not _HANDLER.detect(text):
        return {}, text, []

    try:
        fm, body = _HANDLER.split(text)
    except ValueError:
        # opening marker with no closing one
        return {}, text, ["metadata block is not terminated"]

    body = body.lstrip("\r\n")
    try:
        data = _HANDLER.load(fm)
    except yaml.YAMLError as e:
        return {}, body, [f"metadata block is not valid YAML: {e}"]

    if data is None:
        return {}, body, []
    if not isinstance(data, dict):
        return {}, body, [f"metadata block is a {type(data).__name__}, expected a mapping"]
    return data, body, []


def _scalar_text(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _string_list(name: str, value: Any, warnings: List[str]) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        warnings.append(f"{name} is not a list; ignored")
        return []
    return [str(v) for v in value if v is not None]


def parse_date(value: Any) -> Optional[float]:
    """Best-effort POSIX timestamp for a frontmatter date; None when unparseable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        s = str(value or "").strip()
        if not s:
            return None
        try:
            dt = date_parser.parse(s)
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def parse_article_metadata(
    metadata: Dict[str, Any],
    *,
    slug_from_filename: str,
    locale: str,
    path: str,
) -> Tuple[ArticleRecord, List[str]]:
    """
    Normalize user-provided frontmatter into an ArticleRecord.

    Args:
        metadata: Raw mapping from the document's metadata block (may be empty).
        slug_from_filename: Filename stem, used when no slug is given.
        locale: Language directory the file lives in.
        path: Source file path.
    Returns:
        (record, warnings) where every record field is populated.
    """
    fm = metadata or {}
    warnings: List[str] = []

    for key in _REQUIRED:
        if fm.get(key) in (None, ""):
            warnings.append(f"{key} missing")

    slug = _scalar_text(fm["slug"]) if fm.get("slug") else slug_from_filename
    title = _scalar_text(fm["title"]) if fm.get("title") not in (None, "") else slug
    description = _scalar_text(fm.get("description") or "")
    date_text = _scalar_text(fm["date"]) if fm.get("date") not in (None, "") else ""
    if date_text and parse_date(fm["date"]) is None:
        warnings.append(f"date {date_text!r} is not parseable")

    status = fm.get("status")
    if status is not None and (not isinstance(status, str) or status not in _STATUSES):
        warnings.append(f"status {status!r} is not one of {sorted(_STATUSES)}; ignored")
        status = None

    simd_number = fm.get("simdNumber")
    if simd_number is not None and (not isinstance(simd_number, int) or isinstance(simd_number, bool)):
        warnings.append("simdNumber is not an integer; ignored")
        simd_number = None

    hero = fm.get("heroImage")
    section = fm.get("section")

    record = ArticleRecord(
        title=title,
        description=description,
        slug=slug,
        date=date_text,
        locale=locale,
        audiences=_string_list("audiences", fm.get("audiences"), warnings),
        topics=_string_list("topics", fm.get("topics"), warnings),
        hero_image=str(hero) if hero else None,
        status=status,
        section=str(section) if section else None,
        simd_number=simd_number,
        path=path,
    )
    return record, warnings
