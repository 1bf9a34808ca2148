"""Command-line interface router for ralph-prd."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final

from ralph_prd import __version__
from ralph_prd.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from ralph_prd.constants import CATEGORIES, PRD_YAML_FILE
from ralph_prd.control_plane import (
    PrdRepairError,
    RepairOutcome,
    RepairReport,
    fix_prd,
    resolve_backup_path,
    restore_from_backup,
)
from ralph_prd.main import ExitCode
from ralph_prd.observability import correlation_scope, setup_logging, shutdown_logging
from ralph_prd.persistence import (
    ConversionError,
    convert_prd_to_yaml,
    create_backup,
    list_backups,
    read_prd_file,
    serialize_prd,
    write_prd_auto,
)
from ralph_prd.prompting import TaskFileError, create_filtered_prd, sync_passes_from_tasks
from ralph_prd.recovery import smart_merge
from ralph_prd.ui.render import CLIRenderer, create_renderer
from ralph_prd.validation import validate_prd

_RESTORE_ERROR_LIMIT: Final[int] = 3


@dataclass(eq=False, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.PRD_INVALID)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="ralph-prd",
        description=(
            "ralph-prd: validate, recover, and merge PRD task lists.\n\n"
            "Common workflows:\n"
            "  ralph-prd validate          Check the PRD structure\n"
            "  ralph-prd fix               Repair a corrupted PRD in place\n"
            "  ralph-prd tasks             Write the pending task file for the agent\n"
            "  ralph-prd backups           List PRD backups, newest first\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to ralph TOML config (default: ./ralph.toml if present).",
    )
    common.add_argument(
        "--ralph-dir",
        dest="ralph_dir",
        default=None,
        help="Override the directory holding the PRD (default: .ralph).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and debug logs.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # fix -----------------------------------------------------------------
    fix_parser = subparsers.add_parser(
        "fix",
        parents=[common],
        help="Validate the PRD and repair it in place",
        description=(
            "Validate the PRD. When it is invalid, back it up, try to recover its\n"
            "entries, and otherwise reset it to a recovery template.\n"
            "With a backup argument, restore the PRD from that backup instead.\n\n"
            "Examples:\n"
            "  ralph-prd fix\n"
            "  ralph-prd fix --verify\n"
            "  ralph-prd fix backup.prd.2024-01-15T10-30-00-000Z.json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fix_parser.add_argument("backup", nargs="?", default=None, help="Backup file to restore")
    fix_parser.add_argument(
        "--verify", action="store_true", help="Only check the PRD; never modify it"
    )
    fix_parser.add_argument(
        "--restore-previous",
        action="store_true",
        help="Before resetting, try the newest earlier backup",
    )
    fix_parser.set_defaults(handler=_cmd_fix)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Check the PRD structure without modifying it",
    )
    validate_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    validate_parser.set_defaults(handler=_cmd_validate)

    # merge ---------------------------------------------------------------
    merge_parser = subparsers.add_parser(
        "merge",
        parents=[common],
        help="Forward completion flags from a corrupted PRD onto a valid baseline",
        description=(
            "Keep the baseline's structure and apply passes=true claims found in the\n"
            "corrupted file. Prints the merged PRD unless --write is given.\n\n"
            "Examples:\n"
            "  ralph-prd merge baseline.json .ralph/prd.json --write\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    merge_parser.add_argument("baseline", help="Valid PRD to keep the structure of")
    merge_parser.add_argument("corrupted", help="Corrupted PRD to read completion claims from")
    merge_parser.add_argument(
        "--write",
        action="store_true",
        help="Back up the corrupted file and overwrite it with the merged PRD",
    )
    merge_parser.set_defaults(handler=_cmd_merge)

    # tasks ---------------------------------------------------------------
    tasks_parser = subparsers.add_parser(
        "tasks",
        parents=[common],
        help="Write the pending task file with file references expanded",
    )
    tasks_parser.add_argument(
        "--category", choices=CATEGORIES, default=None, help="Only include this category"
    )
    tasks_parser.set_defaults(handler=_cmd_tasks)

    # sync-tasks ----------------------------------------------------------
    sync_parser = subparsers.add_parser(
        "sync-tasks",
        parents=[common],
        help="Forward completed flags from the task file back onto the PRD",
    )
    sync_parser.set_defaults(handler=_cmd_sync_tasks)

    # convert -------------------------------------------------------------
    convert_parser = subparsers.add_parser(
        "convert",
        parents=[common],
        help="Convert prd.json to prd.yaml",
        description=(
            "Convert the JSON PRD to YAML. The original is kept as prd.json.pre-yaml.\n\n"
            "Examples:\n"
            "  ralph-prd convert --dry-run\n"
            "  ralph-prd convert --force\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    convert_parser.add_argument(
        "--force", "-f", action="store_true", help="Overwrite existing prd.yaml and backup files"
    )
    convert_parser.add_argument(
        "--dry-run", action="store_true", help="Print the YAML without writing anything"
    )
    convert_parser.set_defaults(handler=_cmd_convert)

    # backups -------------------------------------------------------------
    backups_parser = subparsers.add_parser(
        "backups",
        parents=[common],
        help="List PRD backups, newest first",
    )
    backups_parser.set_defaults(handler=_cmd_backups)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the effective configuration as JSON",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        config = _load_effective_config(namespace)
        namespace.config = config
        setup_logging(
            config["observability"],
            run_id=_run_id(),
            level="DEBUG" if _flag(namespace, "verbose") else None,
        )
        try:
            with correlation_scope(command=namespace.command, prd_path=str(_prd_path(config))):
                result = handler(namespace)
        finally:
            shutdown_logging()
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_fix(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    renderer = _get_renderer(args)
    prd_path = _prd_path(config)
    limit = _max_errors(config)

    if args.backup is not None:
        source = resolve_backup_path(args.backup, _ralph_dir(config))
        report = restore_from_backup(prd_path, source)
        if report.outcome is RepairOutcome.RESTORE_FAILED:
            renderer.fail("Could not restore PRD from backup:")
            _render_errors(renderer, report.errors, min(limit, _RESTORE_ERROR_LIMIT))
            return int(ExitCode.PRD_INVALID)
        if report.backup_path is not None:
            renderer.text(f"Created backup of current PRD: {_display_path(report.backup_path)}")
        renderer.ok(f"PRD restored from: {_display_path(source)}")
        renderer.text(f"  Restored {report.entries} entries.")
        return int(ExitCode.SUCCESS)

    renderer.text("Checking PRD structure...\n")
    try:
        report = fix_prd(
            prd_path,
            verify_only=_flag(args, "verify"),
            restore_previous=_flag(args, "restore_previous"),
            prd_location=_display_path(prd_path),
        )
    except PrdRepairError as exc:
        raise CLIError(f"{exc}. Create the PRD before running fix.") from exc

    _render_repair(renderer, report, limit)
    return int(ExitCode.SUCCESS) if report.ok else int(ExitCode.PRD_INVALID)


def _cmd_validate(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    prd_path = _prd_path(config)
    if not prd_path.exists():
        raise CLIError(f"PRD file not found: {_display_path(prd_path)}")

    parsed = read_prd_file(prd_path)
    if parsed is None:
        errors: tuple[str, ...] = ("PRD file could not be parsed",)
        entries = 0
    else:
        result = validate_prd(parsed.content)
        errors = result.errors
        entries = len(result.data) if result.data is not None else 0
    valid = not errors

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "validate",
                "prd_path": str(prd_path),
                "valid": valid,
                "entries": entries,
                "errors": list(errors),
            }
        )
        return int(ExitCode.SUCCESS) if valid else int(ExitCode.PRD_INVALID)

    renderer = _get_renderer(args)
    if valid:
        renderer.ok("PRD is valid.")
        renderer.text(f"  {entries} entries found.")
        return int(ExitCode.SUCCESS)
    renderer.fail("PRD structure is invalid:")
    _render_errors(renderer, errors, _max_errors(config))
    return int(ExitCode.PRD_INVALID)


def _cmd_merge(args: argparse.Namespace) -> int:
    baseline_path = Path(args.baseline)
    corrupted_path = Path(args.corrupted)

    baseline_doc = read_prd_file(baseline_path)
    if baseline_doc is None:
        raise CLIError(f"baseline could not be parsed: {baseline_path}")
    baseline = validate_prd(baseline_doc.content)
    if baseline.data is None:
        raise CLIError(f"baseline is not a valid PRD: {baseline_path}")

    corrupted_doc = read_prd_file(corrupted_path)
    if corrupted_doc is None:
        raise CLIError(f"corrupted file could not be parsed: {corrupted_path}")

    merge = smart_merge(baseline.data, corrupted_doc.content)
    renderer = _get_renderer(args)
    if not _flag(args, "write"):
        sys.stdout.write(serialize_prd(merge.merged))
        return int(ExitCode.SUCCESS)

    backup = create_backup(corrupted_path)
    write_prd_auto(corrupted_path, merge.merged)
    renderer.text(f"Created backup: {_display_path(backup)}")
    renderer.ok(f"Merged {merge.items_updated} completion flag(s) into {corrupted_path}")
    for warning in merge.warnings:
        renderer.warning(warning)
    return int(ExitCode.SUCCESS)


def _cmd_tasks(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    try:
        filtered = create_filtered_prd(
            _prd_path(config),
            _ralph_dir(config),
            category=args.category,
            tasks_file=config["paths"]["tasks_file"],
        )
    except TaskFileError as exc:
        raise CLIError(str(exc)) from exc

    renderer = _get_renderer(args)
    if not filtered.has_incomplete:
        renderer.ok("All tasks complete.")
    else:
        renderer.text(
            f"Wrote {filtered.incomplete} pending task(s) to {_display_path(filtered.tasks_path)}"
        )
    return int(ExitCode.SUCCESS)


def _cmd_sync_tasks(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    tasks_path = _ralph_dir(config) / config["paths"]["tasks_file"]
    synced = sync_passes_from_tasks(tasks_path, _prd_path(config))
    _get_renderer(args).text(f"Synced {synced} completed item(s) from {_display_path(tasks_path)}")
    return int(ExitCode.SUCCESS)


def _cmd_convert(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    try:
        result = convert_prd_to_yaml(
            _ralph_dir(config),
            force=_flag(args, "force"),
            dry_run=_flag(args, "dry_run"),
        )
    except ConversionError as exc:
        raise CLIError(str(exc)) from exc

    renderer = _get_renderer(args)
    if not result.written:
        renderer.text(
            f"Would convert {_display_path(result.json_path)} "
            f"to {_display_path(result.yaml_path)}:\n"
        )
        sys.stdout.write(result.rendered)
        return int(ExitCode.SUCCESS)

    renderer.ok(f"Created {_display_path(result.yaml_path)}")
    renderer.ok(f"Original preserved as {_display_path(result.preserved_path)}")
    renderer.text(f"  Converted {len(result.entries)} entries.")
    renderer.section("To revert:")
    renderer.items(
        [
            f"rm {_display_path(result.yaml_path)}",
            f"mv {_display_path(result.preserved_path)} {_display_path(result.json_path)}",
        ],
        prefix="$ ",
    )
    return int(ExitCode.SUCCESS)


def _cmd_backups(args: argparse.Namespace) -> int:
    config: Mapping[str, Any] = args.config
    renderer = _get_renderer(args)
    backups = list_backups(_prd_path(config))
    if not backups:
        renderer.text("No backups found.")
        return int(ExitCode.SUCCESS)
    renderer.heading(f"{len(backups)} backup(s), newest first:")
    renderer.items([_display_path(path) for path in backups])
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace) -> int:
    print(dump_effective_config(args.config))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render_repair(renderer: CLIRenderer, report: RepairReport, limit: int) -> None:
    if report.outcome is RepairOutcome.VALID:
        renderer.ok("PRD is valid.")
        renderer.text(f"  {report.entries} entries found.")
        return

    if report.errors:
        renderer.fail("PRD structure is invalid:")
        _render_errors(renderer, report.errors, limit)
    else:
        renderer.fail("PRD file could not be parsed.")
    if report.outcome in {RepairOutcome.INVALID, RepairOutcome.UNPARSEABLE}:
        return

    if report.backup_path is not None:
        renderer.text(f"\nCreated backup: {_display_path(report.backup_path)}\n")

    if report.outcome is RepairOutcome.RECOVERED:
        renderer.ok("PRD recovered successfully!")
        renderer.text(f"  Recovered {report.entries} entries by unwrapping/remapping fields.")
    elif report.outcome is RepairOutcome.RESTORED and report.restored_from is not None:
        renderer.ok(f"PRD restored from backup: {_display_path(report.restored_from)}")
        renderer.text(f"  Restored {report.entries} entries.")
        renderer.warning("Recent changes may have been lost.")
    elif report.outcome is RepairOutcome.RESET:
        renderer.ok("PRD reset with recovery task.")
        renderer.text("  The next iteration will instruct the agent to recover entries from backup.")
        if report.backup_path is not None:
            renderer.kv("Backup location", _display_path(report.backup_path))


def _render_errors(renderer: CLIRenderer, errors: Sequence[str], limit: int) -> None:
    renderer.items(list(errors[:limit]))
    if len(errors) > limit:
        renderer.items([f"... and {len(errors) - limit} more errors"])


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = getattr(args, "config_path", None)
    overrides: dict[str, object] = {"paths.ralph_dir": getattr(args, "ralph_dir", None)}
    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _ralph_dir(config: Mapping[str, Any]) -> Path:
    return Path(config["paths"]["ralph_dir"])


def _prd_path(config: Mapping[str, Any]) -> Path:
    """The configured PRD, falling back to ``prd.yaml`` when only that exists."""

    ralph_dir = _ralph_dir(config)
    primary = ralph_dir / config["paths"]["prd_file"]
    if not primary.exists():
        yaml_path = ralph_dir / PRD_YAML_FILE
        if yaml_path.exists():
            return yaml_path
    return primary


def _max_errors(config: Mapping[str, Any]) -> int:
    return int(config["repair"]["max_reported_errors"])


def _display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _run_id() -> str:
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
