"""
Markdown to PDF/HTML/PNG/JPEG converter package.
Renders markdown with markdown-it-py and exports it through headless Chromium.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

__version__ = "1.0.0"

from .config import Config, get_user_config_dir, load_settings
from .console import ConsoleLogger
from .converter import MarkdownConverter, UnsupportedTypeError, convert_md, resolve_types
from .dependencies import DependencyChecker, check_dependencies
from .document import make_html
from .exporter import PlaywrightExporter
from .models import (
    EXPORT_TYPES,
    ConversionRequest,
    ManyTypes,
    OutputArtifactSpec,
    RenderedDocument,
    SingleType,
)
from .paths import LocalWorkspace, convert_img_path, fix_href
from .renderer import MarkdownRenderer, add_toc_to_content, convert_markdown_to_html
from .styles import read_styles

__all__ = [
    "Config",
    "get_user_config_dir",
    "load_settings",
    "ConsoleLogger",
    "MarkdownConverter",
    "UnsupportedTypeError",
    "convert_md",
    "resolve_types",
    "DependencyChecker",
    "check_dependencies",
    "make_html",
    "PlaywrightExporter",
    "EXPORT_TYPES",
    "ConversionRequest",
    "ManyTypes",
    "OutputArtifactSpec",
    "RenderedDocument",
    "SingleType",
    "LocalWorkspace",
    "convert_img_path",
    "fix_href",
    "MarkdownRenderer",
    "add_toc_to_content",
    "convert_markdown_to_html",
    "read_styles",
]
