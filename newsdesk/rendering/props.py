"""
JSX-style attribute parsing for component tags embedded in MDX bodies.

Supported forms:
    name="text"   name='text'   name={<JSON5 literal>}   name   (bare -> True)

Braced values are data only: they go through a JSON5 parser, never through
an evaluator, so `{[{stat: "1M", description: 'tx'}]}` works and anything
that is not a literal is rejected.
"""
from __future__ import annotations

import html
import re
from typing import Any, Dict, Tuple

import json5

from ..errors import ComponentPropsError

_NAME_RE = re.compile(r"[A-Za-z_][\w:.-]*")
_QUOTES = "\"'`"


def _skip_ws(source: str, pos: int) -> int:
    n = len(source)
    while pos < n and source[pos].isspace():
        pos += 1
    return pos


def _matching_brace(source: str, start: int, component: str) -> int:
    """Index of the `}` closing the `{` at `start`, skipping over string literals."""
    depth = 0
    pos = start
    n = len(source)
    while pos < n:
        ch = source[pos]
        if ch in _QUOTES:
            pos += 1
            while pos < n and source[pos] != ch:
                pos += 2 if source[pos] == "\\" else 1
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    raise ComponentPropsError(component, "unbalanced braces in attribute value")


def parse_expression(expr: str, component: str, name: str) -> Any:
    """Parse the inside of `{...}` as a JSON5 value."""
    expr = expr.strip()
    if not expr:
        raise ComponentPropsError(component, f"attribute '{name}' has an empty expression")
    try:
        return json5.loads(expr)
    except ValueError as e:
        raise ComponentPropsError(component, f"attribute '{name}' is not a data literal: {e}") from e


def parse_tag_attributes(source: str, pos: int, component: str) -> Tuple[Dict[str, Any], int, bool]:
    """
    Read attributes from `pos` (just after the tag name) up to the end of the opening tag.

    Returns:
        (props, end, self_closing) where `end` is the index just past `>` or `/>`.
    Raises:
        ComponentPropsError: malformed attribute syntax or an unterminated tag.
    """
    props: Dict[str, Any] = {}
    n = len(source)
    while True:
        pos = _skip_ws(source, pos)
        if pos >= n:
            raise ComponentPropsError(component, "tag is not closed")
        if source.startswith("/>", pos):
            return props, pos + 2, True
        if source[pos] == ">":
            return props, pos + 1, False

        m = _NAME_RE.match(source, pos)
        if not m:
            raise ComponentPropsError(component, f"unexpected {source[pos]!r} in attributes")
        name = m.group(0)
        pos = _skip_ws(source, m.end())

        if pos >= n or source[pos] != "=":
            props[name] = True
            continue

        pos = _skip_ws(source, pos + 1)
        if pos >= n:
            raise ComponentPropsError(component, f"attribute '{name}' has no value")
        ch = source[pos]
        if ch in "\"'":
            end = source.find(ch, pos + 1)
            if end == -1:
                raise ComponentPropsError(component, f"attribute '{name}' has an unterminated string")
            props[name] = html.unescape(source[pos + 1:end])
            pos = end + 1
        elif ch == "{":
            end = _matching_brace(source, pos, component)
            props[name] = parse_expression(source[pos + 1:end], component, name)
            pos = end + 1
        else:
            raise ComponentPropsError(component, f"attribute '{name}' must be quoted or braced")
