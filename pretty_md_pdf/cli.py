"""
Command line entry point.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .console import ConsoleLogger
from .converter import convert_md
from .models import EXPORT_TYPES

OUTPUT_TYPE_CHOICES = list(EXPORT_TYPES) + ["all", "settings"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pretty-md-pdf",
        description="Convert a markdown file to PDF, HTML, PNG or JPEG using headless Chromium",
    )
    parser.add_argument("source", help="Markdown file to convert")
    parser.add_argument("-t", "--type", dest="output_type", default="pdf", choices=OUTPUT_TYPE_CHOICES,
                        help="Output type (default: pdf). 'all' exports every type, 'settings' uses the 'type' setting")
    parser.add_argument("-c", "--config", default=None,
                        help="JSON settings file (default: $PRETTY_MD_PDF_CONFIG or the user config dir)")
    parser.add_argument("--breaks", action="store_true", default=None, help="Render soft line breaks as <br>")
    parser.add_argument("--no-default-styles", action="store_true", help="Do not include the bundled stylesheets")
    parser.add_argument("--style", action="append", dest="styles", default=None, metavar="HREF",
                        help="Additional stylesheet (URL, absolute, ~ or relative path). Can be repeated")
    parser.add_argument("--no-highlight", action="store_true", help="Do not include the syntax highlight theme")
    parser.add_argument("--highlight-style", default=None, help="Pygments style used for code blocks (default: default)")
    parser.add_argument("--executable-path", default=None, help="Chromium/Chrome binary used instead of Playwright's build")
    parser.add_argument("--proxy", default=None, help="Proxy used to download Chromium")
    parser.add_argument("--no-install", action="store_true", help="Never download Chromium")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and keep temporary HTML files")
    return parser


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Settings given on the command line; unset options map to None."""
    return {
        "breaks": args.breaks,
        "includeDefaultStyles": False if args.no_default_styles else None,
        "styles": args.styles,
        "highlight": False if args.no_highlight else None,
        "highlightStyle": args.highlight_style,
        "executablePath": args.executable_path,
        "proxy": args.proxy,
        "debug": True if args.debug else None,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = ConsoleLogger(debug=args.debug)

    try:
        config = Config(cli_overrides(args), settings_path=args.config)
    except ValueError as e:
        logger.error(str(e))
        return 1
    logger.debug_enabled = bool(config.get("debug"))
    if config.settings_path:
        logger.debug(f"Loaded settings from {config.settings_path}")

    source = Path(args.source)
    if not source.is_file():
        logger.error(f"File name does not exist: {source}")
        return 1

    exported = convert_md(
        source,
        args.output_type,
        config.as_dict(),
        install=not args.no_install,
        logger=logger,
    )
    return 0 if exported else 1


if __name__ == "__main__":
    sys.exit(main())
