"""
Export of an assembled HTML document to HTML, PDF, PNG or JPEG.

PDF and images are produced by headless Chromium driven through Playwright.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from playwright.async_api import async_playwright

from .console import ConsoleLogger, default_logger
from .models import OutputArtifactSpec

CRASH_KEYWORDS = (
    "Connection closed",
    "Browser has been closed",
    "Target closed",
    "crashed",
    "Protocol error",
)


def temp_html_path(target_path: Path) -> Path:
    """Temporary page loaded by the browser, written beside the target file."""
    return target_path.with_name(f"{target_path.stem}_tmp.html")


def build_pdf_options(target_path: Path, config: Mapping[str, Any]) -> Dict[str, Any]:
    """Map settings onto ``page.pdf`` keyword arguments.

    ``format`` is only passed when no explicit width/height is set, since
    Playwright gives it priority over both.
    """
    options: Dict[str, Any] = {
        "path": str(target_path),
        "scale": float(config.get("scale") or 1),
        "display_header_footer": bool(config.get("displayHeaderFooter")),
        "header_template": config.get("headerTemplate") or "",
        "footer_template": config.get("footerTemplate") or "",
        "print_background": bool(config.get("printBackground")),
        "landscape": config.get("orientation") == "landscape",
        "margin": {
            "top": config.get("margin.top") or "",
            "right": config.get("margin.right") or "",
            "bottom": config.get("margin.bottom") or "",
            "left": config.get("margin.left") or "",
        },
    }
    if config.get("pageRanges"):
        options["page_ranges"] = config.get("pageRanges")

    width = config.get("width") or ""
    height = config.get("height") or ""
    if width or height:
        if width:
            options["width"] = width
        if height:
            options["height"] = height
    else:
        options["format"] = config.get("format") or "A4"
    return options


def build_screenshot_options(target_path: Path, kind: str, config: Mapping[str, Any]) -> Dict[str, Any]:
    """Map settings onto ``page.screenshot`` keyword arguments.

    A clip rectangle is used only when all four ``clip.*`` values are set;
    otherwise the full page is captured.
    """
    options: Dict[str, Any] = {
        "path": str(target_path),
        "type": kind,
        "omit_background": bool(config.get("omitBackground")),
    }
    if kind == "jpeg":
        options["quality"] = int(config.get("quality") or 100)

    clip = {key: config.get(f"clip.{key}") for key in ("x", "y", "width", "height")}
    if all(value is not None for value in clip.values()):
        options["clip"] = {key: float(value) for key, value in clip.items()}
        options["full_page"] = False
    else:
        options["full_page"] = True
    return options


class PlaywrightExporter:
    """Writes artifacts, reusing one Chromium instance across exports."""

    def __init__(self, logger: Optional[ConsoleLogger] = None):
        self.logger = logger or default_logger
        self._playwright = None
        self._browser = None
        self._page = None

    async def __aenter__(self) -> "PlaywrightExporter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _launch_browser(self, config: Mapping[str, Any]) -> None:
        """Launch a fresh Chromium browser instance."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        launch_options: Dict[str, Any] = {
            "headless": True,
            "args": [
                "--disable-dev-shm-usage",  # Use /tmp instead of /dev/shm
                "--disable-gpu",
                "--no-sandbox",
            ],
        }
        executable_path = config.get("executablePath") or ""
        if executable_path:
            launch_options["executable_path"] = executable_path
        self._browser = await self._playwright.chromium.launch(**launch_options)

    async def _ensure_page(self, config: Mapping[str, Any]):
        """Return a fresh page, starting the browser if needed."""
        if self._browser is None or not self._browser.is_connected():
            self.logger.debug("Initializing browser instance")
            await self._launch_browser(config)

        if self._page is not None and not self._page.is_closed():
            await self._page.close()
        try:
            self._page = await self._browser.new_page()
        except Exception:
            # Browser reported connected but is actually dead
            self.logger.warning("Browser connection stale, restarting...")
            await self.close()
            await self._launch_browser(config)
            self._page = await self._browser.new_page()
        return self._page

    async def close(self) -> None:
        """Close browser and cleanup resources."""
        page, browser, pw = self._page, self._browser, self._playwright
        self._page = None
        self._browser = None
        self._playwright = None

        try:
            if page is not None and not page.is_closed():
                await page.close()
        except Exception as e:
            self.logger.debug(f"Ignoring error while closing page: {e}")
        try:
            if browser is not None and browser.is_connected():
                await browser.close()
        except Exception as e:
            self.logger.debug(f"Ignoring error while closing browser: {e}")
        try:
            if pw is not None:
                await pw.stop()
        except Exception as e:
            self.logger.debug(f"Ignoring error while stopping Playwright: {e}")

    async def export(self, artifact: OutputArtifactSpec, config: Mapping[str, Any]) -> bool:
        """Write `artifact` to its target path.

        Returns:
            True if the file was written.
        """
        target = Path(artifact.target_path)
        if artifact.kind == "html":
            try:
                target.write_text(artifact.html, encoding="utf-8")
            except OSError as e:
                self.logger.show_error(f"Failed to write {target}", e)
                return False
            self.logger.success(f"Exported {target.name}")
            return True

        if artifact.kind not in ("pdf", "png", "jpeg"):
            self.logger.error(f"Cannot export unknown type '{artifact.kind}'")
            return False

        tmp_html = temp_html_path(target)
        try:
            tmp_html.write_text(artifact.html, encoding="utf-8")
            success = await self._render(tmp_html, target, artifact.kind, config)
        except OSError as e:
            self.logger.show_error(f"Failed to write {tmp_html}", e)
            return False
        finally:
            if not config.get("debug"):
                tmp_html.unlink(missing_ok=True)

        if success:
            self.logger.success(f"Exported {target.name}")
        return success

    async def _render(self, html_file: Path, target: Path, kind: str, config: Mapping[str, Any]) -> bool:
        """Load `html_file` in Chromium and print or capture it.

        Retries once with a fresh browser if the browser process crashes mid-export.
        """
        max_attempts = 2

        for attempt in range(1, max_attempts + 1):
            try:
                page = await self._ensure_page(config)
                await page.goto(html_file.absolute().as_uri(), wait_until="networkidle")

                if kind == "pdf":
                    options = build_pdf_options(target, config)
                    self.logger.debug(f"Printing PDF with options: {options}")
                    await page.pdf(**options)
                else:
                    options = build_screenshot_options(target, kind, config)
                    self.logger.debug(f"Capturing {kind} with options: {options}")
                    await page.screenshot(**options)
                return True

            except Exception as e:
                is_crash = any(keyword in str(e) for keyword in CRASH_KEYWORDS)
                if is_crash and attempt < max_attempts:
                    self.logger.warning(f"Browser crashed during {kind} export, restarting and retrying...")
                    await self.close()
                else:
                    self.logger.show_error(f"Failed to export {target.name}", e)
                    return False

        return False
