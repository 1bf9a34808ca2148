"""Output rendering abstraction for the ralph-prd CLI.

Purpose
- Provide a thin rendering layer for CLI output with optional ANSI color.
- Respect NO_COLOR environment variable and --no-color CLI flag.

Functional requirements
- Plain-text rendering must always work on a non-terminal stdout.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

_GREEN: Final[str] = "\x1b[32m"
_RED: Final[str] = "\x1b[31m"
_YELLOW: Final[str] = "\x1b[33m"
_RESET: Final[str] = "\x1b[0m"


def _color_allowed(no_color_flag: bool) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces deterministic plain-text output; status markers are colored only
    on an interactive terminal.
    """

    def __init__(self, *, no_color: bool = False, verbose: bool = False) -> None:
        self.verbose = verbose
        self._color = _color_allowed(no_color)

    def heading(self, text: str) -> None:
        print(text)

    def kv(self, key: str, value: object) -> None:
        print(f"  {key}: {value}")

    def text(self, line: str) -> None:
        print(line)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        print(f"\n{title}")

    def warning(self, text: str) -> None:
        print(self._paint(f"  Warning: {text}", _YELLOW))

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            print(f"  {prefix}{entry}")

    def ok(self, label: str) -> None:
        """Print a success marker line."""

        print(self._paint(f"✓ {label}", _GREEN))

    def fail(self, label: str) -> None:
        """Print a failure marker line."""

        print(self._paint(f"✗ {label}", _RED))

    def _paint(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{color}{text}{_RESET}"


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
