"""
Markdown to PDF/HTML/PNG/JPEG converter using Playwright (Puppeteer approach).

Drives one conversion: resolve the requested output types, then for each
type render the markdown, assemble the HTML document and hand it to the
exporter, one type at a time.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, List, Mapping, Optional, Protocol, Union

from tqdm import tqdm

from .console import ConsoleLogger, default_logger
from .dependencies import check_dependencies
from .document import make_html
from .exporter import PlaywrightExporter
from .models import (
    EXPORT_TYPES,
    ConversionRequest,
    ManyTypes,
    OutputArtifactSpec,
    SingleType,
    TypeSelection,
)
from .paths import LocalWorkspace
from .renderer import convert_markdown_to_html


class UnsupportedTypeError(ValueError):
    """Raised when an output type outside EXPORT_TYPES is requested."""

    def __init__(self, kind: Any = None):
        self.kind = kind
        super().__init__(f"Supported formats: {', '.join(EXPORT_TYPES)}.")


class Exporter(Protocol):
    def export(self, artifact: OutputArtifactSpec, config: Mapping[str, Any]) -> Awaitable[bool]:  # pragma: no cover - interface
        ...


def normalize_type_setting(value: Any) -> TypeSelection:
    """Turn the ``type`` setting (a string or a list of strings) into a selection."""
    if isinstance(value, str):
        return SingleType(value)
    if isinstance(value, (list, tuple)) and value:
        return ManyTypes(tuple(value))
    raise UnsupportedTypeError(value)


def select_types(output_type: str, config: Mapping[str, Any]) -> TypeSelection:
    """Resolve the requested output type.

    ``all`` selects every supported type; ``settings`` defers to the ``type``
    setting, which defaults to ``pdf`` when unset. An empty list selects
    nothing and is rejected.

    Raises:
        UnsupportedTypeError: For any other unknown value.
    """
    if output_type in EXPORT_TYPES:
        return SingleType(output_type)
    if output_type == "all":
        return ManyTypes(EXPORT_TYPES)
    if output_type == "settings":
        value = config.get("type")
        if value is None or value == "":
            value = "pdf"
        return normalize_type_setting(value)
    raise UnsupportedTypeError(output_type)


def resolve_types(output_type: str, config: Mapping[str, Any]) -> List[str]:
    return list(select_types(output_type, config).kinds)


def target_path_for(source_path: Path, kind: str) -> Path:
    """Output path: the source path with its extension replaced by the type."""
    return source_path.with_suffix(f".{kind}")


class MarkdownConverter:
    """Converts markdown files to the requested output types."""

    def __init__(
        self,
        exporter: Optional[Exporter] = None,
        workspace: Optional[LocalWorkspace] = None,
        logger: Optional[ConsoleLogger] = None,
        show_progress: bool = True,
    ):
        self.logger = logger or default_logger
        self.exporter = exporter or PlaywrightExporter(self.logger)
        self.workspace = workspace or LocalWorkspace()
        self.show_progress = show_progress

    async def run(self, request: ConversionRequest) -> List[Path]:
        return await self.convert(request.source_path, request.output_type, request.config)

    async def convert(
        self,
        source_path: Union[str, Path],
        output_type: str,
        config: Mapping[str, Any],
    ) -> List[Path]:
        """Convert `source_path` to every requested output type.

        Types are exported strictly one after the other. An unsupported type
        stops the conversion before it; artifacts already written are kept.
        Errors are logged, never raised.

        Returns:
            The paths of the artifacts that were exported.
        """
        exported: List[Path] = []
        try:
            source_path = Path(source_path).absolute()
            if not source_path.is_file():
                self.logger.error("File name does not exist!")
                return exported

            try:
                kinds = resolve_types(output_type, config)
            except UnsupportedTypeError as e:
                self.logger.error(str(e))
                return exported

            filename = source_path.name
            for kind in tqdm(kinds, desc=f"  {filename}", unit="type", leave=False, disable=not self.show_progress):
                if kind not in EXPORT_TYPES:
                    self.logger.error(str(UnsupportedTypeError(kind)))
                    return exported

                target = target_path_for(source_path, kind)
                self.logger.debug(f"Converting {filename} -> {target.name}")
                with open(source_path, "r", encoding="utf-8") as f:
                    text = f.read()

                content = convert_markdown_to_html(source_path, kind, text, config, self.logger)
                if content is None:
                    self.logger.error(f"Skipping {target.name}: markdown could not be rendered")
                    continue
                html = make_html(content, source_path, config, self.workspace, self.logger)
                if html is None:
                    self.logger.error(f"Skipping {target.name}: HTML document could not be assembled")
                    continue

                artifact = OutputArtifactSpec(target_path=target, kind=kind, html=html)
                if await self.exporter.export(artifact, config):
                    exported.append(target)
        except Exception as e:
            self.logger.show_error("convert()", e)
        return exported


def convert_md(
    source: Union[str, Path],
    output_type: Optional[str] = None,
    config: Optional[Mapping[str, Any]] = None,
    install: bool = True,
    logger: Optional[ConsoleLogger] = None,
) -> List[Path]:
    """Convert a markdown file, making sure a browser is available first.

    Args:
        source: Markdown file, relative paths are resolved against the
            working directory.
        output_type: One of pdf, html, png, jpeg, all or settings
            (default: pdf).
        config: Conversion settings, see ``Config.as_dict``.
        install: Download Chromium when no browser is found.

    Returns:
        The paths of the artifacts that were exported.
    """
    logger = logger or default_logger
    config = dict(config or {})
    output_type = output_type or "pdf"
    source_path = Path(source).resolve()
    logger.info(f"Converting markdown file: {source_path}")

    needs_browser = output_type != "html"
    if needs_browser and not check_dependencies(config, install=install, logger=logger):
        logger.warning("No usable browser found, PDF and image exports will fail")

    request = ConversionRequest(source_path=source_path, output_type=output_type, config=config)

    async def _run() -> List[Path]:
        async with PlaywrightExporter(logger) as exporter:
            converter = MarkdownConverter(exporter=exporter, logger=logger)
            return await converter.run(request)

    return asyncio.run(_run())
