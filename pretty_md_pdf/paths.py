"""
Resolution of stylesheet hrefs and image sources into URIs the browser can load.

The HTML handed to Chromium is written next to the target file (or into a
temporary file), so every local reference is turned into an absolute
``file://`` URI before export.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import os
import re
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .console import ConsoleLogger, default_logger

PathLike = Union[str, Path]

# Straight and typographic double quotes that sneak into hand-written srcs
_QUOTES_RE = re.compile(r'["“”]')


class LocalWorkspace:
    """Host context used to resolve paths: home directory, workspace root and file reads."""

    def __init__(self, root: Optional[PathLike] = None, home: Optional[PathLike] = None):
        """Initialize the workspace.

        Args:
            root: Explicit workspace root. When omitted, each document's own
                directory serves as its root.
            home: Home directory used for ``~`` expansion (defaults to the
                current user's home).
        """
        self._root = Path(root) if root else None
        self._home = str(home) if home else None

    def home_dir(self) -> str:
        return self._home or os.path.expanduser("~")

    def root_for(self, document_path: PathLike) -> Optional[Path]:
        """Return the workspace root that owns `document_path`."""
        if self._root is not None:
            return self._root
        return Path(document_path).parent

    def read_text(self, filename: PathLike, encoding: str = "utf-8") -> str:
        """Read a local file, returning an empty string when it does not exist."""
        filename = str(filename)
        if not filename:
            return ""
        if filename.startswith("file://"):
            if sys.platform == "win32":
                filename = re.sub(r"^file:///", "", filename)
            filename = re.sub(r"^file://", "", filename)
        path = Path(filename)
        if not path.is_file():
            return ""
        return path.read_text(encoding=encoding)


def _file_uri(path: str) -> str:
    return Path(os.path.abspath(path)).as_uri()


def fix_href(
    document_path: PathLike,
    href: str,
    config: Mapping[str, Any],
    workspace: Optional[LocalWorkspace] = None,
    logger: Optional[ConsoleLogger] = None,
) -> str:
    """Resolve a stylesheet href into a URI.

    First match wins:

    1. ``http``/``https`` URLs are returned unchanged.
    2. ``~`` is replaced with the home directory.
    3. Absolute paths and ``file:`` URIs become ``file://`` URIs.
    4. Relative paths are joined to the workspace root when
       ``stylesRelativePathFile`` is ``False``, otherwise to the document's
       directory.

    A malformed href is reported and returned as given.
    """
    if not href:
        return href

    workspace = workspace or LocalWorkspace()
    logger = logger or default_logger
    try:
        parsed = urlparse(href)
        if parsed.scheme in ("http", "https"):
            return href

        if href.startswith("~"):
            return _file_uri(workspace.home_dir() + href[1:])

        if parsed.scheme == "file":
            return _file_uri(url2pathname(parsed.path))
        if os.path.isabs(href):
            return _file_uri(href)

        root = workspace.root_for(document_path)
        if config.get("stylesRelativePathFile") is False and root:
            return _file_uri(os.path.normpath(os.path.join(str(root), href)))

        document_dir = os.path.dirname(str(document_path))
        return _file_uri(os.path.normpath(os.path.join(document_dir, href)))
    except Exception as e:
        logger.show_error("fix_href()", e)
        return href


def decode_img_src(src: str) -> str:
    """Percent-decode an image src and drop stray quote characters."""
    return _QUOTES_RE.sub("", unquote(src))


def convert_img_path(src: str, document_path: PathLike, logger: Optional[ConsoleLogger] = None) -> str:
    """Turn an image src found in the markdown into an absolute ``file://`` URI.

    Remote URLs and other schemes are left alone; ``file:`` URIs only get
    their slashes normalized; everything else is resolved against the
    directory of `document_path`. ``#`` is escaped as ``%23`` so Chromium
    does not read it as a fragment.
    """
    if not src:
        return src

    logger = logger or default_logger
    try:
        href = decode_img_src(src).replace("\\", "/").replace("#", "%23")
        protocol = urlparse(href).scheme
        if protocol == "file" and not href.startswith("file:///"):
            return re.sub(r"^file://", "file:///", href)
        if protocol == "file":
            return href
        if not protocol or os.path.isabs(href):
            document_dir = os.path.dirname(str(document_path))
            href = os.path.abspath(os.path.join(document_dir, href))
            href = href.replace("\\", "/").replace("#", "%23")
            if href.startswith("//"):
                return "file:" + href
            if href.startswith("/"):
                return "file://" + href
            return "file:///" + href
        return src
    except Exception as e:
        logger.show_error("convert_img_path()", e)
        return src
