"""
Assembly of the final HTML document from the rendered content.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader

from .console import ConsoleLogger, default_logger
from .models import RenderedDocument
from .paths import LocalWorkspace
from .styles import read_styles

TEMPLATE_DIR = Path(__file__).parent / "template"
TEMPLATE_NAME = "template.html"

_environment = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=False)


def render_template(document: RenderedDocument) -> str:
    template = _environment.get_template(TEMPLATE_NAME)
    return template.render(title=document.title, style=document.style, content=document.content)


def make_html(
    content: str,
    document_path: Union[str, Path],
    config: Mapping[str, Any],
    workspace: Optional[LocalWorkspace] = None,
    logger: Optional[ConsoleLogger] = None,
) -> Optional[str]:
    """Wrap rendered markdown in the page template, with the document's stylesheets.

    The page title is the markdown file name.
    """
    logger = logger or default_logger
    try:
        document = RenderedDocument(
            title=os.path.basename(str(document_path)),
            style=read_styles(document_path, config, workspace, logger),
            content=content,
        )
        return render_template(document)
    except Exception as e:
        logger.show_error("make_html()", e)
        return None
