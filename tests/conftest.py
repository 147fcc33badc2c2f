# tests/conftest.py
import sys
import os
from pathlib import Path

import pytest

# Ensure API key and environment exist for tests before importing the app
os.environ.setdefault("API_KEY", "dev")
os.environ.setdefault("NEWSDESK_ENV", "development")

# Insert the project root (one level up) at the front of sys.path
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(PROJECT_ROOT))

from newsdesk.content_index import revalidate_news_index  # noqa: E402
from newsdesk.settings import settings  # noqa: E402


def make_doc(frontmatter: str | None, body: str = "Body text.\n") -> str:
    """Document text with an optional `---` block (frontmatter given as raw YAML)."""
    if frontmatter is None:
        return body
    return f"---\n{frontmatter.strip()}\n---\n\n{body}"


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "news"
    root.mkdir()
    return root


@pytest.fixture
def write_doc(content_root):
    """write_doc("en", "foo", "title: Foo") -> path of content/news/en/foo.mdx"""
    def _write(locale: str, name: str, frontmatter: str | None = None, body: str = "Body text.\n"):
        d = content_root / locale
        d.mkdir(exist_ok=True)
        p = d / f"{name}.mdx"
        p.write_text(make_doc(frontmatter, body), encoding="utf-8")
        return p
    return _write


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch, content_root):
    """Point the site at the per-test content root and start each test with an empty cache."""
    monkeypatch.setattr(settings, "content_root", str(content_root))
    monkeypatch.setattr(settings, "environment", "development")
    revalidate_news_index()
    yield
    revalidate_news_index()
