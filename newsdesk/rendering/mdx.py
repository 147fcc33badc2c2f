"""
Render MDX bodies to HTML.

Bodies are Markdown with embedded component tags (`<YouTube videoId="..." />`,
`<Alert title="...">...</Alert>`). A Python-Markdown extension swaps each
registered tag for the HTML its Jinja template produces, stashing it the
same way Markdown stashes raw HTML so later stages leave it alone.
"""
from __future__ import annotations

import re
import logging
import textwrap
from typing import List, Optional

import markdown
from markdown.extensions import Extension
from markdown.postprocessors import Postprocessor
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from ..errors import ComponentPropsError
from .components import COMPONENTS
from .props import parse_tag_attributes

logger = logging.getLogger(__name__)

BASE_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

_NAMES = "|".join(re.escape(n) for n in COMPONENTS)

# Fence lines and backtick runs are matched too so code can be stepped over.
_CODE = r"^[ \t]*(?P<fence>`{3,}|~{3,})[^\n]*$|(?P<ticks>`+)"
_TAG_RE = re.compile(_CODE + r"|<(?P<name>%s)(?=[\s/>])" % _NAMES, re.MULTILINE)


def _code_end(text: str, m: re.Match) -> int:
    """End of the fenced block or inline code span that `m` opens."""
    if m.group("fence"):
        fence = re.escape(m.group("fence"))
        close = re.compile(r"^[ \t]*%s[ \t]*$" % fence, re.MULTILINE).search(text, m.end())
    else:
        close = re.compile(r"(?<!`)%s(?!`)" % re.escape(m.group("ticks"))).search(text, m.end())
    return m.end() if close is None else close.end()


def _closing_tag(text: str, name: str, pos: int) -> Optional[re.Match]:
    """The `</name>` balancing an opening tag that ends at `pos`, counting nested `<name>`."""
    pattern = re.compile(
        _CODE + r"|<(?P<open>%s)(?=[\s/>])|(?P<close></%s\s*>)" % (re.escape(name), re.escape(name)),
        re.MULTILINE,
    )
    depth = 1
    while True:
        m = pattern.search(text, pos)
        if not m:
            return None
        if m.group("close"):
            depth -= 1
            if depth == 0:
                return m
            pos = m.end()
        elif m.group("open"):
            _, pos, self_closing = parse_tag_attributes(text, m.end(), name)
            if not self_closing:
                depth += 1
        else:
            pos = _code_end(text, m)


def _own_line(text: str, start: int, end: int) -> bool:
    """True when only whitespace shares the lines on which [start, end) sits."""
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    line_end = len(text) if line_end == -1 else line_end
    return not text[line_start:start].strip() and not text[end:line_end].strip()


class ComponentPreprocessor(Preprocessor):
    """
    Replace registered component tags with stashed HTML.

    Runs on the raw body, before fenced code is stashed, so component
    children reach their own render_mdx() call as plain Markdown.
    """

    def run(self, lines: List[str]) -> List[str]:
        text = "\n".join(lines)
        out: List[str] = []
        pos = 0
        while True:
            m = _TAG_RE.search(text, pos)
            if not m:
                out.append(text[pos:])
                break

            if not m.group("name"):
                stop = _code_end(text, m)
                out.append(text[pos:stop])
                pos = stop
                continue

            name = m.group("name")
            props, end, self_closing = parse_tag_attributes(text, m.end(), name)
            children_html = None
            if not self_closing:
                close = _closing_tag(text, name, end)
                if not close:
                    raise ComponentPropsError(name, f"missing </{name}>")
                children = textwrap.dedent(text[end:close.start()]).strip()
                children_html = render_mdx(children) if children else ""
                end = close.end()

            html = COMPONENTS[name].render(props, children_html)
            placeholder = self.md.htmlStash.store(html)
            out.append(text[pos:m.start()])
            out.append(f"\n\n{placeholder}\n\n" if _own_line(text, m.start(), end) else placeholder)
            pos = end

        return "".join(out).split("\n")


class InlineCodeTreeprocessor(Treeprocessor):
    """Mark `code` elements that are not inside `pre` so they style apart from blocks."""

    def run(self, root):
        for parent in root.iter():
            if parent.tag == "pre":
                continue
            for child in parent:
                if child.tag == "code":
                    child.set("class", "inline-code")


class CodeBlockPostprocessor(Postprocessor):
    """Fenced blocks are stashed as raw HTML, so tag `<pre>` after serialization."""

    def run(self, text: str) -> str:
        return text.replace("<pre>", '<pre class="code-block">')


class MdxComponentsExtension(Extension):
    def extendMarkdown(self, md):
        # after normalize_whitespace (30), before fenced_code (25)
        md.preprocessors.register(ComponentPreprocessor(md), "mdx_components", 27)
        md.treeprocessors.register(InlineCodeTreeprocessor(md), "inline_code", 15)
        md.postprocessors.register(CodeBlockPostprocessor(md), "code_block", 5)


def render_mdx(body: str) -> str:
    """
    Convert an MDX body to HTML.

    Raises:
        ComponentPropsError: a registered component tag is malformed.
    """
    md = markdown.Markdown(extensions=BASE_EXTENSIONS + [MdxComponentsExtension()])
    return md.convert(body or "")
