"""
Markdown to HTML rendering with markdown-it-py.

Image sources are rewritten by a strategy chosen once per output type: the
HTML export keeps paths relative to the markdown file (the .html file is
written beside it), every other export needs absolute ``file://`` URIs.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from bs4 import BeautifulSoup
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.token import Token
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_PLANTUML_SERVER
from .console import ConsoleLogger, default_logger
from .paths import convert_img_path, decode_img_src
from .plugins import math_plugin, plantuml_plugin, toc_plugin

TOC_TOKEN_RE = re.compile(r"\[toc\]", re.IGNORECASE)
CODE_BLOCK_TEMPLATE = "<pre class='hljs'><code><div>{}</div></code></pre>"

Rewrite = Callable[[str], str]


def add_toc_to_content(text: str) -> str:
    """Prepend a ``[toc]`` marker unless the text already has one."""
    if TOC_TOKEN_RE.search(text):
        return text
    return "[toc]\n" + text


def rewrite_html_block_images(html: str, rewrite: Rewrite) -> str:
    """Rewrite the ``src`` of every ``<img>`` in a raw HTML block."""
    soup = BeautifulSoup(html, "html.parser")
    images = soup.find_all("img")
    if not images:
        return html
    for img in images:
        src = img.get("src")
        if src:
            img["src"] = rewrite(src)
    return str(soup)


class MarkdownRenderer:
    """Owns one configured markdown-it instance."""

    def __init__(
        self,
        image_rewrite: Rewrite,
        html_block_rewrite: Optional[Rewrite] = None,
        breaks: bool = False,
        plantuml_server: str = DEFAULT_PLANTUML_SERVER,
        plantuml_open_marker: str = "@startuml",
        plantuml_close_marker: str = "@enduml",
        logger: Optional[ConsoleLogger] = None,
    ):
        """Initialize the renderer.

        Args:
            image_rewrite: Maps the ``src`` of a markdown image to the value
                written in the HTML.
            html_block_rewrite: Maps the content of a raw HTML block to its
                output; ``None`` keeps raw HTML untouched.
            breaks: Render soft line breaks as ``<br>``.
        """
        self.image_rewrite = image_rewrite
        self.html_block_rewrite = html_block_rewrite
        self.breaks = breaks
        self.plantuml_server = plantuml_server
        self.plantuml_open_marker = plantuml_open_marker
        self.plantuml_close_marker = plantuml_close_marker
        self.logger = logger or default_logger
        self._formatter = HtmlFormatter(nowrap=True)
        self._md = self._build_engine()

    @classmethod
    def for_type(
        cls,
        document_path: Union[str, Path],
        kind: str,
        config: Mapping[str, Any],
        logger: Optional[ConsoleLogger] = None,
    ) -> "MarkdownRenderer":
        """Build the renderer for one output type of `document_path`."""
        logger = logger or default_logger
        html_block_rewrite: Optional[Rewrite] = None
        if kind == "html":
            image_rewrite: Rewrite = decode_img_src
        else:
            def image_rewrite(src: str) -> str:
                return convert_img_path(src, document_path, logger)

            def html_block_rewrite(html: str) -> str:
                return rewrite_html_block_images(html, image_rewrite)

        return cls(
            image_rewrite,
            html_block_rewrite,
            breaks=bool(config.get("breaks")),
            plantuml_server=config.get("plantumlServer") or DEFAULT_PLANTUML_SERVER,
            plantuml_open_marker=config.get("plantumlOpenMarker") or "@startuml",
            plantuml_close_marker=config.get("plantumlCloseMarker") or "@enduml",
            logger=logger,
        )

    def highlight_code(self, code: str, lang: str, attrs: str = "") -> str:
        """Highlight a fenced code block; unknown languages are escaped instead."""
        lexer = None
        if lang:
            try:
                lexer = get_lexer_by_name(lang)
            except ClassNotFound:
                lexer = None

        if lexer is None:
            text = escapeHtml(code)
        else:
            try:
                text = highlight(code, lexer, self._formatter)
            except Exception as e:
                text = escapeHtml(code)
                self.logger.show_error("highlight_code()", e)
        return CODE_BLOCK_TEMPLATE.format(text)

    def _build_engine(self) -> MarkdownIt:
        md = MarkdownIt(
            "js-default",
            {"html": True, "breaks": self.breaks, "highlight": self.highlight_code},
        )

        default_image = md.renderer.rules["image"]
        image_rewrite = self.image_rewrite

        def render_image(renderer, tokens: List[Token], idx: int, options, env) -> str:
            token = tokens[idx]
            src = token.attrGet("src")
            if src is not None:
                token.attrSet("src", image_rewrite(str(src)))
            return default_image(tokens, idx, options, env)

        md.add_render_rule("image", render_image)

        if self.html_block_rewrite is not None:
            html_block_rewrite = self.html_block_rewrite

            def render_html_block(renderer, tokens: List[Token], idx: int, options, env) -> str:
                return html_block_rewrite(tokens[idx].content)

            md.add_render_rule("html_block", render_html_block)

        md.use(tasklists_plugin)
        md.use(math_plugin)
        md.use(
            plantuml_plugin,
            server=self.plantuml_server,
            open_marker=self.plantuml_open_marker,
            close_marker=self.plantuml_close_marker,
        )
        md.use(anchors_plugin, min_level=1, max_level=6)
        md.use(toc_plugin)
        return md

    def render(self, text: str) -> str:
        return self._md.render(text)


def convert_markdown_to_html(
    document_path: Union[str, Path],
    kind: str,
    text: str,
    config: Mapping[str, Any],
    logger: Optional[ConsoleLogger] = None,
) -> Optional[str]:
    """Render `text` for the given output type.

    Returns:
        The HTML fragment, or None if the markdown engine failed.
    """
    logger = logger or default_logger
    text = add_toc_to_content(text)
    try:
        logger.debug(f"Converting markdown to HTML ({kind}) ...")
        renderer = MarkdownRenderer.for_type(document_path, kind, config, logger)
        return renderer.render(text)
    except Exception as e:
        logger.show_error("convert_markdown_to_html()", e)
        return None
