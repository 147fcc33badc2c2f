# tests/test_app.py
import asyncio
import io
import json

import pytest
from fastapi.testclient import TestClient

import newsdesk.main as main
from newsdesk.middleware.logging import json_logger
from newsdesk.settings import settings

client = TestClient(main.app)

API_HEADERS = {"X-API-Key": settings.api_key}


# --------------------------------------------------------------------
# Fixture: a small published/draft corpus in two locales
# --------------------------------------------------------------------
@pytest.fixture
def corpus(write_doc):
    write_doc("en", "alpha", (
        "title: Alpha\ndescription: First\ndate: 2024-01-01\n"
        "audiences: [developers]\ntopics: [consensus, proposals]\nstatus: published"
    ), "Alpha body with `code`.\n\n<YouTube videoId=\"abc\" />\n")
    write_doc("en", "beta", (
        "title: Beta\ndate: 2024-02-01\naudiences: [finance]\ntopics: [reports]\nstatus: published"
    ))
    write_doc("en", "draft-post", "title: Hidden draft\ndate: 2024-03-01\naudiences: [developers]\nstatus: draft")
    write_doc("es", "beta", "title: Beta ES\ndate: 2024-02-01\naudiences: [finance]\nstatus: published")
    write_doc("en", "broken", "title: Broken\nstatus: draft", "<StatCards stats={oops} />\n")


# --------------------------------------------------------------------
# 1) Service routes
# --------------------------------------------------------------------
def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_root_redirects_to_default_locale():
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code in (302, 307)
    assert resp.headers["location"] == "/en/news"


def test_metrics_exposition(corpus):
    client.get("/en/news")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "news_index_scans_total" in resp.text
    assert "news_index_cache_total" in resp.text


# --------------------------------------------------------------------
# 2) HTML pages
# --------------------------------------------------------------------
def test_news_home_lists_published_for_locale(corpus):
    resp = client.get("/en/news")
    assert resp.status_code == 200
    html = resp.text
    assert "Alpha" in html and "Beta" in html
    assert "Hidden draft" not in html
    assert "Beta ES" not in html
    # newest first
    assert html.index("Beta") < html.index("Alpha")


def test_news_home_other_locale(corpus):
    html = client.get("/es/news").text
    assert "Beta ES" in html
    assert "Alpha" not in html


def test_news_home_topic_filter(corpus):
    html = client.get("/en/news", params={"topics": "reports"}).text
    assert "Beta" in html and "Alpha" not in html


def test_audience_section_page(corpus):
    resp = client.get("/es/news/developers")
    assert resp.status_code == 200
    html = resp.text
    assert "Developers" in html
    assert "Alpha" in html
    assert "Beta" not in html and "Hidden draft" not in html


def test_developers_section_shows_callout(corpus):
    html = client.get("/en/news/developers").text
    assert "news-callout" in html
    assert "Open for Review" in html
    assert 'href="https://github.com/solana-foundation/solana-improvement-documents/pull/326"' in html

    assert "news-callout" not in client.get("/en/news/finance").text


def test_article_page_renders_body(corpus):
    resp = client.get("/en/news/alpha")
    assert resp.status_code == 200
    html = resp.text
    assert "<h1>Alpha</h1>" in html
    assert "min read" in html
    assert "youtube-nocookie.com/embed/abc" in html
    assert '<code class="inline-code">code</code>' in html


def test_article_page_falls_back_to_default_locale(corpus):
    resp = client.get("/fr/news/alpha")
    assert resp.status_code == 200
    assert "<h1>Alpha</h1>" in resp.text


def test_article_page_not_found(corpus):
    resp = client.get("/en/news/missing")
    assert resp.status_code == 404
    assert "Article not found" in resp.text


def test_invalid_locale_is_rejected():
    assert client.get("/e!x/news").status_code == 422


def test_frontmatter_is_escaped(write_doc):
    write_doc("en", "xss", "title: \"<script>alert(1)</script>\"\nstatus: published")
    html = client.get("/en/news/xss").text
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


# --------------------------------------------------------------------
# 3) JSON API
# --------------------------------------------------------------------
def test_api_news_filters(corpus):
    body = client.get("/api/news", params={"locale": "en", "audience": "developers"}).json()
    assert [a["slug"] for a in body] == ["draft-post", "alpha"]

    body = client.get("/api/news", params={"locale": "en", "status": "published"}).json()
    assert [a["slug"] for a in body] == ["beta", "alpha"]

    body = client.get("/api/news", params={"topics": "consensus,reports", "topic_mode": "all"}).json()
    assert body == []

    body = client.get("/api/news", params=[("topics", "consensus"), ("topics", "reports")]).json()
    assert {a["slug"] for a in body} == {"alpha", "beta"}


def test_api_news_record_shape(corpus):
    body = client.get("/api/news", params={"locale": "es"}).json()
    assert len(body) == 1
    rec = body[0]
    assert rec["locale"] == "es"
    assert rec["date"] == "2024-02-01"
    assert "heroImage" in rec and "simdNumber" in rec


def test_api_news_rejects_unknown_status():
    assert client.get("/api/news", params={"status": "pending"}).status_code == 422


def test_api_article(corpus):
    resp = client.get("/api/news/fr/alpha")
    assert resp.status_code == 200
    data = resp.json()
    assert data["locale"] == "en"
    assert data["frontmatter"]["title"] == "Alpha"
    assert data["readingTime"]["words"] > 0
    assert "youtube-nocookie" in data["html"]


def test_body_rendering_runs_off_the_event_loop(corpus, monkeypatch):
    seen = []

    def fake_render(body):
        try:
            asyncio.get_running_loop()
            seen.append("event-loop")
        except RuntimeError:
            seen.append("worker")
        return "<p>rendered</p>"

    monkeypatch.setattr(main, "render_mdx", fake_render)
    assert "<p>rendered</p>" in client.get("/en/news/alpha").text
    assert client.get("/api/news/en/alpha").json()["html"] == "<p>rendered</p>"
    assert seen == ["worker", "worker"]


def test_api_article_not_found(corpus):
    assert client.get("/api/news/en/missing").status_code == 404


def test_api_article_bad_component_is_500(corpus):
    resp = client.get("/api/news/en/broken")
    assert resp.status_code == 500
    assert "StatCards" in resp.json()["detail"]


# --------------------------------------------------------------------
# 4) Revalidation & API key
# --------------------------------------------------------------------
def test_revalidate_requires_key():
    assert client.post("/revalidate").status_code == 401
    assert client.post("/revalidate", headers={"X-API-Key": "wrong"}).status_code == 401


def test_revalidate_refreshes_production_cache(write_doc, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    write_doc("en", "a", "title: A\nstatus: published")
    assert len(client.get("/api/news").json()) == 1

    write_doc("en", "b", "title: B\nstatus: published")
    assert len(client.get("/api/news").json()) == 1

    resp = client.post("/revalidate", headers=API_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"revalidated": True, "tag": "news-index"}
    assert len(client.get("/api/news").json()) == 2


def test_revalidate_open_when_no_key_configured(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "")
    assert client.post("/revalidate").status_code == 200


def test_public_pages_need_no_key():
    assert client.get("/en/news").status_code == 200


# --------------------------------------------------------------------
# 5) LoggingMiddleware
# --------------------------------------------------------------------
def test_logging_middleware_logs(monkeypatch):
    from logging import StreamHandler
    stream = io.StringIO()
    monkeypatch.setattr(json_logger, "handlers", [StreamHandler(stream)])

    resp = client.get("/health", headers={"X-Request-ID": "req-1"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "req-1"

    data = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert data["request_id"] == "req-1"
    assert data["method"] == "GET" and data["path"] == "/health" and data["status"] == 200
