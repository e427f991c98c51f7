"""
Layered settings for a conversion run.

Precedence (later wins): built-in defaults, JSON settings file, environment
variables, command line. Settings files may use the ``markdown-pdf.`` key
prefix of VS Code ``settings.json`` files.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

APP_NAME = "pretty-md-pdf"
ENV_PREFIX = "PRETTY_MD_PDF_"
SETTINGS_KEY_PREFIX = "markdown-pdf."
DEFAULT_PLANTUML_SERVER = "https://www.plantuml.com/plantuml"

DEFAULT_HEADER_TEMPLATE = (
    "<div style=\"font-size: 9px; margin-left: 1cm;\"> <span class='title'></span></div> "
    "<div style=\"font-size: 9px; margin-left: auto; margin-right: 1cm; \"> <span class='date'></span></div>"
)
DEFAULT_FOOTER_TEMPLATE = (
    "<div style=\"font-size: 9px; margin: 0 auto;\"> "
    "<span class='pageNumber'></span> / <span class='totalPages'></span></div>"
)

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Markdown and styles
    "type": "pdf",
    "breaks": False,
    "includeDefaultStyles": True,
    "styles": [],
    "stylesRelativePathFile": False,
    "highlight": True,
    "highlightStyle": "",
    # PlantUML
    "plantumlServer": DEFAULT_PLANTUML_SERVER,
    "plantumlOpenMarker": "@startuml",
    "plantumlCloseMarker": "@enduml",
    # Browser
    "executablePath": "",
    "proxy": "",
    # PDF
    "scale": 1,
    "displayHeaderFooter": True,
    "headerTemplate": DEFAULT_HEADER_TEMPLATE,
    "footerTemplate": DEFAULT_FOOTER_TEMPLATE,
    "printBackground": True,
    "orientation": "portrait",
    "pageRanges": "",
    "format": "A4",
    "width": "",
    "height": "",
    "margin.top": "1.5cm",
    "margin.bottom": "1cm",
    "margin.right": "1cm",
    "margin.left": "1cm",
    # PNG / JPEG
    "quality": 100,
    "clip.x": None,
    "clip.y": None,
    "clip.width": None,
    "clip.height": None,
    "omitBackground": False,
    # Diagnostics
    "debug": False,
}

# Environment variable suffix -> settings key
ENV_SETTINGS = {
    "PROXY": "proxy",
    "EXECUTABLE_PATH": "executablePath",
    "PLANTUML_SERVER": "plantumlServer",
}


def get_user_config_dir() -> Path:
    """Return the per-user configuration directory."""
    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def get_default_settings_path() -> Path:
    """Return the settings file used when no explicit path is given."""
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
    if env_path:
        return Path(env_path)
    return get_user_config_dir() / "settings.json"


def load_settings(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a JSON settings file.

    Keys prefixed with ``markdown-pdf.`` are stripped of the prefix so a VS
    Code settings file can be used as-is; keys of other extensions are
    ignored in that case.

    Raises:
        ValueError: If the file is not valid JSON or not a JSON object.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid settings file '{path}': {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid settings file '{path}': expected a JSON object")

    prefixed = any(key.startswith(SETTINGS_KEY_PREFIX) for key in raw)
    settings = {}
    for key, value in raw.items():
        if key.startswith(SETTINGS_KEY_PREFIX):
            settings[key[len(SETTINGS_KEY_PREFIX):]] = value
        elif not prefixed:
            settings[key] = value
    return settings


class Config:
    """Merged conversion settings."""

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, settings_path: Optional[Union[str, Path]] = None):
        """Build the settings from every layer.

        Args:
            cli_config: Command-line overrides; ``None`` values are ignored.
            settings_path: Explicit settings file. It must exist; the default
                location is only read when present.
        """
        self._settings: Dict[str, Any] = dict(DEFAULT_SETTINGS)

        if settings_path is not None:
            self.settings_path: Optional[Path] = Path(settings_path)
            if not self.settings_path.is_file():
                raise ValueError(f"Settings file not found: '{self.settings_path}'")
            self._settings.update(load_settings(self.settings_path))
        else:
            default_path = get_default_settings_path()
            self.settings_path = default_path if default_path.is_file() else None
            if self.settings_path:
                self._settings.update(load_settings(self.settings_path))

        for suffix, key in ENV_SETTINGS.items():
            value = os.environ.get(f"{ENV_PREFIX}{suffix}")
            if value:
                self._settings[key] = value

        for key, value in (cli_config or {}).items():
            if value is not None:
                self._settings[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return a copy of the merged settings, as consumed by the converter."""
        return dict(self._settings)
