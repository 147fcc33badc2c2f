# scripts/build_news_index.py
from __future__ import annotations
import argparse, json, sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from newsdesk.content_index import filter_articles, scan_news_directory  # noqa: E402

def main():
    ap = argparse.ArgumentParser(description="Scan a content root and write the article index as JSON.")
    ap.add_argument("--root", default="content/news", help="Content root with one folder per locale")
    ap.add_argument("--out", default="-", help="Output file ('-' for stdout)")
    ap.add_argument("--status", default=None, choices=["draft", "published", "archived"])
    args = ap.parse_args()

    items = filter_articles(scan_news_directory(args.root), status=args.status)
    payload = json.dumps([it.model_dump(by_alias=True) for it in items], indent=2, ensure_ascii=False)

    if args.out == "-":
        print(payload)
    else:
        out = Path(args.out); out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload + "\n", encoding="utf-8")
        print("wrote", len(items), "articles to", str(out))

if __name__ == "__main__":
    main()
