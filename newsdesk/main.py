# main.py: FastAPI news site over a directory of MDX articles
# - HTML pages: /{locale}/news, audience sections, article pages
# - JSON API: /api/news, /api/news/{locale}/{slug}
# - /revalidate (API key), /health, /metrics

import logging
from typing import List, Optional

from dateutil import parser as date_parser
from fastapi import FastAPI, HTTPException, Path, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from prometheus_fastapi_instrumentator import Instrumentator

from .settings import settings
from .errors import ComponentPropsError, ContentNotFoundError
from .content_index import (
    NEWS_INDEX_TAG,
    filter_articles,
    get_news_index,
    normalize_locale,
    revalidate_news_index,
)
from .load_content import load_localized_content
from .metrics import news_render_seconds
from .middleware.api_key import APIKeyMiddleware
from .middleware.logging import LoggingMiddleware
from .models import ArticleRecord, ArticleResponse, ArticleStatus, RevalidateResponse
from .rendering.components import env as jinja_env
from .rendering.mdx import render_mdx
from .search_params import parse_topic_mode, parse_topics

# ------------------------------------------------------------------------------
# Logging & Globals
# ------------------------------------------------------------------------------
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

LOCALE_PATTERN = r"^[A-Za-z]{2,3}([-_][A-Za-z0-9]{2,8})?$"

# Audience landing pages: slug -> (title, description). Always list default-locale articles.
AUDIENCE_SECTIONS = {
    "developers": ("Developers", "Articles for developers."),
    "finance": ("Finance", "Articles for finance."),
    "governance": ("Governance", "Articles for governance."),
    "upgrades": ("Upgrades", "Articles for upgrades."),
}

# Optional banner above a section's list
SECTION_CALLOUTS = {
    "developers": {
        "badge_text": "Open for Review",
        "badge_variant": "outline",
        "title": "Vote on SIMD-0326: Alpenglow",
        "description": (
            "A new proposal to upgrade Solana's core consensus protocol from TowerBFT to "
            "Alpenglow (Votor). This change promises higher resilience, better performance, "
            "lower latency, and reduced bandwidth usage."
        ),
        "highlights": [
            "Consensus finality under 1 second in optimal conditions.",
            "Increases fault tolerance to 40% crashes and 20% Byzantine faults.",
            "Removes on-chain voting, introduces direct P2P votes and BLS signature aggregation.",
            "Maintains economic incentives with Validator Admission Ticket (VAT).",
        ],
        "link": "https://github.com/solana-foundation/solana-improvement-documents/pull/326",
        "button_text": "View Proposal & Vote",
    },
}

# ------------------------------------------------------------------------------
# FastAPI app & middleware wiring
# ------------------------------------------------------------------------------
app = FastAPI(
    title="Newsdesk",
    description="Localized news site rendered from MDX articles on disk.",
    version="0.1.0",
)

# Read-only JSON API may be consumed from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.add_middleware(APIKeyMiddleware)
app.add_middleware(LoggingMiddleware)

# Prometheus /metrics
Instrumentator().instrument(app).expose(app)

templates = Jinja2Templates(env=jinja_env)

# ==============================================================================
# Helpers
# ==============================================================================

def format_date(value) -> str:
    """'2024-02-01' -> 'Feb 1, 2024'; unparseable values are shown as written."""
    s = str(value or "").strip()
    if not s:
        return ""
    try:
        dt = date_parser.parse(s)
    except (ValueError, OverflowError):
        return s
    return f"{dt:%b} {dt.day}, {dt.year}"

jinja_env.filters["format_date"] = format_date


def _render_list(request: Request, *, locale: str, title: str, description: str,
                 articles: List[ArticleRecord], base_path: str, topics: List[str],
                 callout: Optional[dict] = None):
    return templates.TemplateResponse(
        request,
        "news_list.html",
        {
            "site_title": settings.site_title,
            "locale": locale,
            "title": title,
            "description": description,
            "articles": articles,
            "base_path": base_path,
            "active_topics": topics,
            "callout": callout,
        },
    )


def _not_found(request: Request, locale: str, slug: str):
    return templates.TemplateResponse(
        request,
        "not_found.html",
        {"site_title": settings.site_title, "locale": locale, "slug": slug},
        status_code=404,
    )


def _render_body(body: str, slug: str) -> str:
    try:
        with news_render_seconds.time():
            return render_mdx(body)
    except ComponentPropsError as e:
        logger.exception("Rendering '%s' failed", slug)
        raise HTTPException(status_code=500, detail=f"Could not render article: {e}")

# ==============================================================================
# Routes: service
# ==============================================================================

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "environment": settings.environment,
        "content_root": settings.content_root,
        "cached": settings.is_production,
    }

@app.post("/revalidate", response_model=RevalidateResponse)
async def revalidate():
    revalidate_news_index()
    return RevalidateResponse(revalidated=True, tag=NEWS_INDEX_TAG)

# ==============================================================================
# Routes: JSON API
# ==============================================================================

@app.get("/api/news", response_model=List[ArticleRecord])
async def api_news(
    locale: Optional[str] = Query(None, description="Match records by base language (e.g. 'en')."),
    audience: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    topics: Optional[List[str]] = Query(None, description="Repeat or comma-separate."),
    topic: Optional[str] = Query(None),
    topic_mode: Optional[str] = Query(None, description="'any' (default) or 'all'."),
    status: Optional[ArticleStatus] = Query(None),
):
    items = await run_in_threadpool(get_news_index)
    if locale:
        items = [it for it in items if normalize_locale(it.locale) == normalize_locale(locale)]
    return filter_articles(
        items,
        audience=audience,
        section=section,
        topics=parse_topics(topics, topic),
        topic_mode=parse_topic_mode(topic_mode),
        status=status,
    )

@app.get("/api/news/{locale}/{slug}", response_model=ArticleResponse)
async def api_article(locale: str = Path(pattern=LOCALE_PATTERN), slug: str = Path(...)):
    try:
        content = await run_in_threadpool(load_localized_content, slug, locale)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    html = await run_in_threadpool(_render_body, content.body, slug)
    return ArticleResponse(**content.model_dump(), html=html)

# ==============================================================================
# Routes: pages
# ==============================================================================

@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(f"/{settings.default_locale}/news")

@app.get("/{locale}/news", response_class=HTMLResponse)
async def news_home(
    request: Request,
    locale: str = Path(pattern=LOCALE_PATTERN),
    topics: Optional[List[str]] = Query(None),
    topic: Optional[str] = Query(None),
    topic_mode: Optional[str] = Query(None),
):
    index = await run_in_threadpool(get_news_index)
    wanted = parse_topics(topics, topic)
    articles = filter_articles(
        [it for it in index if normalize_locale(it.locale) == normalize_locale(locale)],
        topics=wanted,
        topic_mode=parse_topic_mode(topic_mode),
        status="published",
    )
    return _render_list(
        request,
        locale=locale,
        title="Latest news",
        description="Updates, ecosystem news, and more.",
        articles=articles,
        base_path=f"/{locale}/news",
        topics=wanted,
    )

@app.get("/{locale}/news/{slug}", response_class=HTMLResponse)
async def news_page(
    request: Request,
    locale: str = Path(pattern=LOCALE_PATTERN),
    slug: str = Path(...),
    topics: Optional[List[str]] = Query(None),
    topic: Optional[str] = Query(None),
    topic_mode: Optional[str] = Query(None),
):
    if slug in AUDIENCE_SECTIONS:
        title, description = AUDIENCE_SECTIONS[slug]
        index = await run_in_threadpool(get_news_index)
        default = normalize_locale(settings.default_locale)
        wanted = parse_topics(topics, topic)
        articles = filter_articles(
            [it for it in index if normalize_locale(it.locale) == default],
            audience=slug,
            topics=wanted,
            topic_mode=parse_topic_mode(topic_mode),
            status="published",
        )
        return _render_list(
            request,
            locale=locale,
            title=title,
            description=description,
            articles=articles,
            base_path=f"/{locale}/news/{slug}",
            topics=wanted,
            callout=SECTION_CALLOUTS.get(slug),
        )

    try:
        content = await run_in_threadpool(load_localized_content, slug, locale)
    except ContentNotFoundError:
        logger.info("No article '%s' for locale '%s'", slug, locale)
        return _not_found(request, locale, slug)

    body_html = await run_in_threadpool(_render_body, content.body, slug)
    return templates.TemplateResponse(
        request,
        "article.html",
        {
            "site_title": settings.site_title,
            "locale": locale,
            "frontmatter": content.frontmatter,
            "reading_time": content.reading_time,
            "served_locale": content.locale,
            "body_html": body_html,
        },
    )
