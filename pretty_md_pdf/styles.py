"""
Builds the ``<style>``/``<link>`` block injected into the document head.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .console import ConsoleLogger, default_logger
from .paths import LocalWorkspace, fix_href

STYLES_DIR = Path(__file__).parent / "styles"

MATH_STYLESHEET = "katex.css"
DEFAULT_STYLESHEET = "markdown.css"
DOCUMENT_STYLESHEET = "markdown-pdf.css"
DEFAULT_HIGHLIGHT_STYLE = "default"

# Code blocks are emitted as <pre class='hljs'>, see renderer.py
HIGHLIGHT_SCOPE = ".hljs"


def make_css(filename: Union[str, Path], workspace: Optional[LocalWorkspace] = None) -> str:
    """Wrap a local stylesheet in a ``<style>`` element; missing files yield ``""``."""
    workspace = workspace or LocalWorkspace()
    css = workspace.read_text(filename)
    if css:
        return "\n<style>\n" + css + "\n</style>\n"
    return ""


def make_link(href: str) -> str:
    return '<link rel="stylesheet" href="' + href + '" type="text/css">'


def make_highlight_css(
    highlight_style: str,
    workspace: Optional[LocalWorkspace] = None,
    logger: Optional[ConsoleLogger] = None,
) -> str:
    """Return the syntax-highlight theme as a ``<style>`` block.

    A stylesheet of that name in the bundled styles directory wins; otherwise
    the name (with any ``.css`` suffix removed) is looked up as a Pygments
    style.
    """
    logger = logger or default_logger
    name = highlight_style or DEFAULT_HIGHLIGHT_STYLE

    bundled = STYLES_DIR / name
    if bundled.suffix == ".css" and bundled.is_file():
        return make_css(bundled, workspace)

    style_name = name[:-len(".css")] if name.endswith(".css") else name
    try:
        css = HtmlFormatter(style=style_name).get_style_defs(HIGHLIGHT_SCOPE)
    except ClassNotFound:
        logger.warning(f"Unknown highlight style '{name}', code blocks will not be colored")
        return ""
    return "\n<style>\n" + css + "\n</style>\n"


def read_styles(
    document_path: Union[str, Path],
    config: Mapping[str, Any],
    workspace: Optional[LocalWorkspace] = None,
    logger: Optional[ConsoleLogger] = None,
) -> str:
    """Concatenate every stylesheet for the document, in cascade order.

    1. Math stylesheet (always)
    2. Default markdown stylesheet (``includeDefaultStyles``)
    3. User ``styles`` links (``includeDefaultStyles``)
    4. Highlight theme (``highlight``)
    5. Document stylesheet (``includeDefaultStyles``)
    6. User ``styles`` links, again, regardless of ``includeDefaultStyles``

    With ``includeDefaultStyles`` set, every user link appears twice.
    """
    workspace = workspace or LocalWorkspace()
    logger = logger or default_logger
    try:
        include_default_styles = config.get("includeDefaultStyles")
        styles = config.get("styles") or []
        has_user_styles = isinstance(styles, (list, tuple)) and len(styles) > 0

        style = make_css(STYLES_DIR / MATH_STYLESHEET, workspace)

        if include_default_styles:
            style += make_css(STYLES_DIR / DEFAULT_STYLESHEET, workspace)

        if include_default_styles and has_user_styles:
            for href in styles:
                style += make_link(fix_href(document_path, href, config, workspace, logger))

        if config.get("highlight"):
            style += make_highlight_css(config.get("highlightStyle") or "", workspace, logger)

        if include_default_styles:
            style += make_css(STYLES_DIR / DOCUMENT_STYLESHEET, workspace)

        if has_user_styles:
            for href in styles:
                style += make_link(fix_href(document_path, href, config, workspace, logger))

        return style
    except Exception as e:
        logger.show_error("read_styles()", e)
        return ""
