from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import pytest

from pretty_md_pdf.console import ConsoleLogger
from pretty_md_pdf.models import OutputArtifactSpec


class RecordingExporter:
    """Stands in for the browser export step and records every call."""

    def __init__(self, result: bool = True, write: bool = False):
        self.calls: List[Tuple[OutputArtifactSpec, Mapping[str, Any]]] = []
        self.result = result
        self.write = write

    async def export(self, artifact: OutputArtifactSpec, config: Mapping[str, Any]) -> bool:
        self.calls.append((artifact, config))
        if self.write:
            Path(artifact.target_path).write_text(artifact.html, encoding="utf-8")
        return self.result

    @property
    def kinds(self) -> List[str]:
        return [artifact.kind for artifact, _ in self.calls]


@pytest.fixture
def exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture
def logger() -> ConsoleLogger:
    return ConsoleLogger(debug=True)


@pytest.fixture
def markdown_file(tmp_path: Path) -> Path:
    source = tmp_path / "notes.md"
    source.write_text("# Notes\n\nSome text.\n\n![diagram](images/diagram.png)\n", encoding="utf-8")
    return source


@pytest.fixture
def base_config() -> Dict[str, Any]:
    return {
        "includeDefaultStyles": True,
        "highlight": True,
        "highlightStyle": "",
        "styles": [],
        "breaks": False,
    }


@pytest.fixture
def exporter_class():
    return RecordingExporter
