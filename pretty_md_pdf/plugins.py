"""
markdown-it extensions: KaTeX math markup, PlantUML diagrams and the ``[toc]``
table of contents.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from typing import Any, Dict, List, Tuple

import plantuml
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_block import StateBlock
from markdown_it.rules_core import StateCore
from markdown_it.rules_inline import StateInline
from markdown_it.token import Token
from mdit_py_plugins.dollarmath import dollarmath_plugin

from .config import DEFAULT_PLANTUML_SERVER

# ${toc}, [toc], [[toc]], [_toc_] ... on a line of their own
TOC_MARKER_RE = re.compile(r"^(\$\{toc\}|\[\[?_?toc_?\]?\])$", re.IGNORECASE)
TOC_INLINE_RE = re.compile(r"\$\{toc\}|\[\[?_?toc_?\]?\]", re.IGNORECASE)

PLANTUML_FENCE_LANGS = ("plantuml", "puml")


def _katex_source(content: str, options: Dict[str, Any]) -> str:
    # KaTeX auto-render picks up \( \) and \[ \] delimiters in the browser
    if options.get("display_mode"):
        return escapeHtml("\\[" + content + "\\]")
    return escapeHtml("\\(" + content + "\\)")


def math_plugin(md: MarkdownIt) -> None:
    """Parse ``$...$`` and ``$$...$$`` into markup typeset by KaTeX at load time.

    Dollar signs follow the KaTeX conventions: no space after the opening
    ``$``, and no digit right after the closing one, so prices are left alone.
    """
    md.use(
        dollarmath_plugin,
        allow_space=False,
        allow_digits=False,
        double_inline=True,
        renderer=_katex_source,
    )


def plantuml_url(source: str, server: str = DEFAULT_PLANTUML_SERVER, image_format: str = "svg") -> str:
    """Return the PlantUML server URL rendering `source`."""
    return f"{server.rstrip('/')}/{image_format}/{plantuml.deflate_and_encode(source)}"


def plantuml_plugin(
    md: MarkdownIt,
    server: str = DEFAULT_PLANTUML_SERVER,
    image_format: str = "svg",
    open_marker: str = "@startuml",
    close_marker: str = "@enduml",
) -> None:
    """Render PlantUML diagrams as images served by a PlantUML server.

    Two syntaxes are recognized:

    - bare ``@startuml`` ... ``@enduml`` blocks
    - ``plantuml`` / ``puml`` fenced code blocks (markers optional)
    """

    def plantuml_block(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
        if state.sCount[start_line] - state.blkIndent >= 4:
            return False
        pos = state.bMarks[start_line] + state.tShift[start_line]
        maximum = state.eMarks[start_line]
        if not state.src[pos:maximum].startswith(open_marker):
            return False

        next_line = start_line
        closed = False
        while next_line + 1 < end_line:
            next_line += 1
            pos = state.bMarks[next_line] + state.tShift[next_line]
            maximum = state.eMarks[next_line]
            if state.src[pos:maximum].rstrip() == close_marker:
                closed = True
                break
        if not closed:
            return False
        if silent:
            return True

        token = state.push("plantuml", "img", 0)
        token.block = True
        token.markup = open_marker
        token.content = state.getLines(start_line, next_line + 1, state.blkIndent, True)
        token.map = [start_line, next_line + 1]
        state.line = next_line + 1
        return True

    def render_diagram(source: str) -> str:
        source = source.strip("\n")
        if not source.lstrip().startswith("@start"):
            source = f"{open_marker}\n{source}\n{close_marker}"
        src = escapeHtml(plantuml_url(source, server, image_format))
        return f'<img src="{src}" alt="uml diagram">\n'

    def render_plantuml(self, tokens: List[Token], idx: int, options, env) -> str:
        return render_diagram(tokens[idx].content)

    default_fence = md.renderer.rules["fence"]

    def render_fence(self, tokens: List[Token], idx: int, options, env) -> str:
        info = tokens[idx].info.strip()
        lang = info.split(maxsplit=1)[0].lower() if info else ""
        if lang in PLANTUML_FENCE_LANGS:
            return render_diagram(tokens[idx].content)
        return default_fence(tokens, idx, options, env)

    md.block.ruler.before(
        "fence",
        "plantuml",
        plantuml_block,
        {"alt": ["paragraph", "reference", "blockquote", "list"]},
    )
    md.add_render_rule("plantuml", render_plantuml)
    md.add_render_rule("fence", render_fence)


def _heading_title(inline: Token) -> str:
    """Plain text of a heading, without the permalink added by the anchors plugin."""
    parts = []
    for child in inline.children or []:
        if child.type == "link_open" and "header-anchor" in str(child.attrGet("class") or ""):
            break
        if child.type in ("text", "code_inline", "math_inline"):
            parts.append(child.content)
    return "".join(parts).strip()


def _collect_headings(tokens: List[Token], min_level: int, max_level: int) -> List[Tuple[int, str, str]]:
    headings = []
    for idx, token in enumerate(tokens):
        if token.type != "heading_open" or idx + 1 >= len(tokens):
            continue
        level = int(token.tag[1:])
        anchor = token.attrGet("id")
        if not anchor or level < min_level or level > max_level:
            continue
        headings.append((level, str(anchor), _heading_title(tokens[idx + 1])))
    return headings


def build_toc(headings: List[Tuple[int, str, str]], container_class: str = "table-of-contents") -> str:
    """Render (level, anchor, title) triples as nested ordered lists."""
    html = [f'<nav class="{container_class}">']
    levels: List[int] = []
    for level, anchor, title in headings:
        if not levels or level > levels[-1]:
            html.append("<ol>")
            levels.append(level)
        else:
            while len(levels) > 1 and level < levels[-1]:
                html.append("</li></ol>")
                levels.pop()
            html.append("</li>")
        html.append(f'<li><a href="#{escapeHtml(anchor)}">{escapeHtml(title)}</a>')
    while levels:
        html.append("</li></ol>")
        levels.pop()
    html.append("</nav>\n")
    return "".join(html)


def toc_plugin(
    md: MarkdownIt,
    min_level: int = 1,
    max_level: int = 6,
    container_class: str = "table-of-contents",
) -> None:
    """Replace a ``[toc]`` marker with a table of contents.

    A marker on a line of its own is claimed at block level, so it also ends
    a paragraph it starts or interrupts. A marker inside running text is
    expanded in place. Headings need ids, so this must be registered after
    the anchors plugin.
    """

    def toc_block(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
        if state.sCount[start_line] - state.blkIndent >= 4:
            return False
        pos = state.bMarks[start_line] + state.tShift[start_line]
        maximum = state.eMarks[start_line]
        marker = state.src[pos:maximum].strip()
        if not TOC_MARKER_RE.match(marker):
            return False
        if silent:
            return True

        token = state.push("toc_body", "nav", 0)
        token.block = True
        token.markup = marker
        token.map = [start_line, start_line + 1]
        state.line = start_line + 1
        return True

    def toc_inline(state: StateInline, silent: bool) -> bool:
        if state.src[state.pos] not in "[$":
            return False
        match = TOC_INLINE_RE.match(state.src, state.pos)
        if not match:
            return False
        if not silent:
            token = state.push("toc_body", "nav", 0)
            token.markup = match.group(0)
        state.pos = match.end()
        return True

    def toc_rule(state: StateCore) -> None:
        placeholders = []
        for token in state.tokens:
            if token.type == "toc_body":
                placeholders.append(token)
            elif token.type == "inline" and token.children:
                placeholders.extend(child for child in token.children if child.type == "toc_body")
        if not placeholders:
            return
        toc = build_toc(_collect_headings(state.tokens, min_level, max_level), container_class)
        for token in placeholders:
            token.content = toc

    def render_toc(self, tokens: List[Token], idx: int, options, env) -> str:
        return tokens[idx].content

    md.block.ruler.before("paragraph", "toc", toc_block, {"alt": ["paragraph"]})
    md.inline.ruler.before("link", "toc", toc_inline)
    md.core.ruler.push("toc", toc_rule)
    md.add_render_rule("toc_body", render_toc)
