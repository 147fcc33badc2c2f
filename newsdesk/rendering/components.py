from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from ..errors import ComponentPropsError

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)

Props = Dict[str, Any]


@dataclass(frozen=True)
class Component:
    name: str
    template: str
    context: Callable[[Props, Markup], Dict[str, Any]]

    def render(self, props: Props, children: Optional[str] = None) -> str:
        ctx = self.context(props, Markup(children or ""))
        return env.get_template(self.template).render(**ctx).strip()


def _required_str(component: str, props: Props, key: str) -> str:
    value = props.get(key)
    if value is None or value is True or str(value).strip() == "":
        raise ComponentPropsError(component, f"'{key}' is required")
    return str(value).strip()


def _alert(props: Props, children: Markup) -> Dict[str, Any]:
    return {
        "title": props.get("title"),
        "description": props.get("description"),
        "variant": props.get("variant") or "default",
        "class_name": props.get("className") or "",
        "children": children,
    }


def _stat_cards(props: Props, children: Markup) -> Dict[str, Any]:
    stats = props.get("stats") or []
    if not isinstance(stats, list) or not all(isinstance(s, dict) for s in stats):
        raise ComponentPropsError("StatCards", "'stats' must be a list of {stat, description} objects")
    columns = props.get("columns")
    if columns is not None and (not isinstance(columns, int) or isinstance(columns, bool)):
        raise ComponentPropsError("StatCards", "'columns' must be an integer")
    count = len(stats) or 1
    return {
        "stats": stats,
        "columns": max(1, columns if columns is not None else count),
        "class_name": props.get("className") or "",
    }


def _youtube(props: Props, children: Markup) -> Dict[str, Any]:
    video_id = _required_str("YouTube", props, "videoId")
    return {
        "video_id": video_id,
        "src": f"https://www.youtube-nocookie.com/embed/{quote(video_id, safe='')}",
        "title": props.get("title") or "YouTube video",
    }


def _tweet(props: Props, children: Markup) -> Dict[str, Any]:
    tweet_id = _required_str("Tweet", props, "id")
    return {
        "tweet_id": tweet_id,
        "href": f"https://twitter.com/i/status/{quote(tweet_id, safe='')}",
    }


def _spec_viewer(props: Props, children: Markup) -> Dict[str, Any]:
    height = props.get("height", 600)
    if isinstance(height, (int, float)) and not isinstance(height, bool):
        height = f"{height}px"
    return {
        "src": _required_str("SpecViewer", props, "src"),
        "title": props.get("title") or "Spec Viewer",
        "height": str(height),
        "class_name": props.get("className") or "",
    }


# Closed registry: tags not listed here are left in the markup untouched.
COMPONENTS: Dict[str, Component] = {
    c.name: c
    for c in (
        Component("Alert", "components/alert.html", _alert),
        Component("StatCards", "components/stat_cards.html", _stat_cards),
        Component("YouTube", "components/youtube.html", _youtube),
        Component("Tweet", "components/tweet.html", _tweet),
        Component("SpecViewer", "components/spec_viewer.html", _spec_viewer),
    )
}
