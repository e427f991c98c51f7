"""
Colored console logging shared by every conversion step.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import traceback
from typing import Optional

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ConsoleLogger:
    """Prints prefixed, colored status lines to stdout."""

    def __init__(self, debug: bool = False):
        self.debug_enabled = debug

    def debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug_enabled:
            print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def info(self, message: str) -> None:
        """Log info message with color."""
        print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def warning(self, message: str) -> None:
        """Log warning message with color."""
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def error(self, message: str) -> None:
        """Log error message with color."""
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")

    def success(self, message: str) -> None:
        """Log success message with color."""
        print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")

    def show_error(self, context: str, error: Optional[BaseException] = None) -> None:
        """Report a failure in `context`, with the exception detail if there is one.

        The traceback is only printed in debug mode.
        """
        self.error(context)
        if error is None:
            return
        try:
            detail = str(error)
        except Exception:
            detail = "Unknown error (exception string conversion failed)"
        self.error(f"{type(error).__name__}: {detail}")
        if self.debug_enabled:
            formatted = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {formatted.rstrip()}")


default_logger = ConsoleLogger()
