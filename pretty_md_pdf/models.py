"""
Value objects passed between the conversion steps.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Tuple, Union

EXPORT_TYPES: Tuple[str, ...] = ("pdf", "html", "png", "jpeg")


@dataclass(frozen=True)
class SingleType:
    """A single requested output type."""

    kind: str

    @property
    def kinds(self) -> Tuple[str, ...]:
        return (self.kind,)


@dataclass(frozen=True)
class ManyTypes:
    """An ordered list of requested output types."""

    kinds: Tuple[str, ...]


TypeSelection = Union[SingleType, ManyTypes]


@dataclass(frozen=True)
class ConversionRequest:
    source_path: Path
    output_type: str
    config: Mapping[str, Any]


@dataclass(frozen=True)
class RenderedDocument:
    """Values substituted into the HTML template."""

    title: str
    style: str
    content: str


@dataclass(frozen=True)
class OutputArtifactSpec:
    """One file to produce: where, which format, and the finished HTML."""

    target_path: Path
    kind: str
    html: str
