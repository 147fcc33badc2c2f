# newsdesk/metrics.py
from prometheus_client import Counter, Histogram

# Index metrics
news_index_scans_total = Counter(
    "news_index_scans_total",
    "Total number of full content directory scans"
)

news_index_documents = Histogram(
    "news_index_documents",
    "Number of documents found per scan",
    buckets=[0, 1, 5, 10, 25, 50, 100, 250, 500, 1000]
)

news_index_skipped_files_total = Counter(
    "news_index_skipped_files_total",
    "Number of files skipped while scanning",
    ["reason"]  # label: e.g. "too_large", "unreadable", "unreadable_dir"
)

news_metadata_warnings_total = Counter(
    "news_metadata_warnings_total",
    "Metadata fields that were missing or had to be defaulted"
)

# Cache metrics
news_index_cache_total = Counter(
    "news_index_cache_total", "Index cache lookups", ["result"]  # hit / miss / bypass
)
news_index_invalidations_total = Counter(
    "news_index_invalidations_total", "Explicit index cache invalidations", ["tag"]
)

# Article metrics
news_article_load_total = Counter(
    "news_article_load_total", "Article lookups by outcome", ["outcome"]  # ok / fallback / not_found
)
news_render_seconds = Histogram(
    "news_render_seconds", "MDX body render time (s)",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1)
)
