"""
Detection and installation of the Chromium build used for exports.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from playwright.sync_api import sync_playwright

from .console import ConsoleLogger, default_logger


def proxy_environment(config: Mapping[str, Any], base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Return a copy of `base` (default: ``os.environ``) with the configured proxy applied."""
    env = dict(os.environ if base is None else base)
    proxy = config.get("proxy") or ""
    if proxy:
        env["HTTPS_PROXY"] = proxy
        env["HTTP_PROXY"] = proxy
    return env


class DependencyChecker:
    """Checks for a usable Chromium and installs Playwright's build when missing."""

    INSTALL_COMMAND: List[str] = [sys.executable, "-m", "playwright", "install", "chromium"]

    def __init__(self, logger: Optional[ConsoleLogger] = None):
        self.logger = logger or default_logger

    def bundled_executable_path(self) -> str:
        """Path of the Chromium build managed by Playwright (may not exist yet)."""
        with sync_playwright() as p:
            return p.chromium.executable_path

    def check_browser(self, config: Mapping[str, Any]) -> bool:
        """Return True if a configured or bundled Chromium binary exists."""
        executable_path = config.get("executablePath") or ""
        if executable_path and Path(executable_path).exists():
            self.logger.debug(f"Using configured browser: {executable_path}")
            return True

        try:
            bundled = self.bundled_executable_path()
        except Exception as e:
            self.logger.show_error("check_browser()", e)
            return False
        if bundled and Path(bundled).exists():
            self.logger.debug(f"Using bundled Chromium: {bundled}")
            return True
        return False

    def install_chromium(self, config: Mapping[str, Any]) -> bool:
        """Download Playwright's Chromium build.

        The proxy setting only reaches the installer process, never the
        current process environment.
        """
        self.logger.info("Installing Chromium ...")
        try:
            subprocess.run(
                self.INSTALL_COMMAND,
                check=True,
                capture_output=True,
                text=True,
                env=proxy_environment(config),
            )
        except subprocess.CalledProcessError as e:
            self.logger.error(f"Failed to download Chromium: {e.stderr}")
            return False
        except OSError as e:
            self.logger.show_error("install_chromium()", e)
            return False

        if self.check_browser(config):
            self.logger.success("Chromium installation succeeded.")
            return True
        self.logger.error("Chromium was downloaded but could not be found.")
        return False

    def ensure_browser(self, config: Mapping[str, Any]) -> bool:
        """Install Chromium unless a usable browser is already present."""
        if self.check_browser(config):
            return True
        return self.install_chromium(config)


def check_dependencies(config: Mapping[str, Any], install: bool = True, logger: Optional[ConsoleLogger] = None) -> bool:
    """Return True if exports can run, installing Chromium first when allowed."""
    checker = DependencyChecker(logger)
    if install:
        return checker.ensure_browser(config)
    if checker.check_browser(config):
        return True
    (logger or default_logger).error(
        "Chromium is not installed. Run 'python -m playwright install chromium' or set executablePath."
    )
    return False
