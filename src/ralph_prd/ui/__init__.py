"""Command-line surface: argparse router and plain-text renderer."""

from ralph_prd.ui.cli import CLIError, build_parser, run_cli
from ralph_prd.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]
