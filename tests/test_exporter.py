import asyncio

from pretty_md_pdf.config import DEFAULT_SETTINGS
from pretty_md_pdf.exporter import (
    PlaywrightExporter,
    build_pdf_options,
    build_screenshot_options,
    temp_html_path,
)
from pretty_md_pdf.models import OutputArtifactSpec


def test_temp_html_path(tmp_path):
    assert temp_html_path(tmp_path / "notes.pdf") == tmp_path / "notes_tmp.html"


def test_pdf_options_from_defaults(tmp_path):
    options = build_pdf_options(tmp_path / "notes.pdf", DEFAULT_SETTINGS)
    assert options["path"] == str(tmp_path / "notes.pdf")
    assert options["format"] == "A4"
    assert options["landscape"] is False
    assert options["display_header_footer"] is True
    assert options["print_background"] is True
    assert options["margin"] == {"top": "1.5cm", "right": "1cm", "bottom": "1cm", "left": "1cm"}
    assert "width" not in options
    assert "page_ranges" not in options


def test_pdf_size_overrides_format(tmp_path):
    config = dict(DEFAULT_SETTINGS, width="10cm", height="20cm", orientation="landscape", pageRanges="1-2")
    options = build_pdf_options(tmp_path / "notes.pdf", config)
    assert "format" not in options
    assert options["width"] == "10cm"
    assert options["height"] == "20cm"
    assert options["landscape"] is True
    assert options["page_ranges"] == "1-2"


def test_png_screenshot_has_no_quality(tmp_path):
    options = build_screenshot_options(tmp_path / "notes.png", "png", DEFAULT_SETTINGS)
    assert options["type"] == "png"
    assert "quality" not in options
    assert options["full_page"] is True
    assert "clip" not in options


def test_jpeg_screenshot_with_clip(tmp_path):
    config = dict(DEFAULT_SETTINGS, quality=80, **{"clip.x": 0, "clip.y": 10, "clip.width": 300, "clip.height": 200})
    options = build_screenshot_options(tmp_path / "notes.jpeg", "jpeg", config)
    assert options["quality"] == 80
    assert options["clip"] == {"x": 0.0, "y": 10.0, "width": 300.0, "height": 200.0}
    assert options["full_page"] is False


def test_partial_clip_captures_full_page(tmp_path):
    config = dict(DEFAULT_SETTINGS, **{"clip.x": 0, "clip.y": 0})
    options = build_screenshot_options(tmp_path / "notes.jpeg", "jpeg", config)
    assert options["full_page"] is True
    assert "clip" not in options


def test_html_export_writes_file_without_browser(tmp_path, logger):
    target = tmp_path / "notes.html"
    artifact = OutputArtifactSpec(target_path=target, kind="html", html="<p>hi</p>")
    exporter = PlaywrightExporter(logger)
    assert asyncio.run(exporter.export(artifact, DEFAULT_SETTINGS)) is True
    assert target.read_text(encoding="utf-8") == "<p>hi</p>"
    assert exporter._browser is None


def test_unknown_kind_is_rejected(tmp_path, logger):
    artifact = OutputArtifactSpec(target_path=tmp_path / "notes.docx", kind="docx", html="")
    assert asyncio.run(PlaywrightExporter(logger).export(artifact, DEFAULT_SETTINGS)) is False


def test_temporary_html_is_removed(tmp_path, logger, monkeypatch):
    seen = []

    async def fake_render(self, html_file, target, kind, config):
        seen.append(html_file.read_text(encoding="utf-8"))
        return True

    monkeypatch.setattr(PlaywrightExporter, "_render", fake_render)
    target = tmp_path / "notes.pdf"
    artifact = OutputArtifactSpec(target_path=target, kind="pdf", html="<p>hi</p>")
    assert asyncio.run(PlaywrightExporter(logger).export(artifact, DEFAULT_SETTINGS)) is True
    assert seen == ["<p>hi</p>"]
    assert not temp_html_path(target).exists()


def test_temporary_html_is_kept_in_debug(tmp_path, logger, monkeypatch):
    async def fake_render(self, html_file, target, kind, config):
        return False

    monkeypatch.setattr(PlaywrightExporter, "_render", fake_render)
    target = tmp_path / "notes.png"
    artifact = OutputArtifactSpec(target_path=target, kind="png", html="<p>hi</p>")
    config = dict(DEFAULT_SETTINGS, debug=True)
    assert asyncio.run(PlaywrightExporter(logger).export(artifact, config)) is False
    assert temp_html_path(target).exists()


def test_context_manager_closes_browser(logger, monkeypatch):
    closed = []

    async def fake_close(self):
        closed.append(self)

    monkeypatch.setattr(PlaywrightExporter, "close", fake_close)

    async def use_exporter():
        async with PlaywrightExporter(logger) as exporter:
            return exporter

    exporter = asyncio.run(use_exporter())
    assert closed == [exporter]
