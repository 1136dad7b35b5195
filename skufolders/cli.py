"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import os
import re
import sys
from typing import List, Sequence, Tuple

from . import importer, reporting
from .cli_formatter import CLIFormatter, detect_terminal_capabilities
from .config import (
    MAX_THUMBNAIL_WIDTH,
    MIN_THUMBNAIL_WIDTH,
    PREFIX_ENV,
    THUMB_WIDTH_ENV,
    NamingConfig,
    configure_naming,
    validate_thumbnail_width,
)
from .exceptions import ConfigError, ExportError, InputError
from .exporter import effective_prefix
from .keys import group_key_for
from .session import Session
from .store import GroupStore
from .utils import human_readable_size, log_info

MANIFEST_NAME = "export_manifest.json"
_PREFIX_TARGET = re.compile(r"^(?P<key>.+):(?P<position>[^:=]*)=(?P<prefix>.*)$")


def _thumb_width_arg(value: str) -> int:
    try:
        return validate_thumbnail_width(int(value))
    except (ValueError, ConfigError) as exc:
        raise argparse.ArgumentTypeError(
            f"expected an integer between {MIN_THUMBNAIL_WIDTH} and {MAX_THUMBNAIL_WIDTH}"
        ) from exc


def _pair_arg(value: str) -> Tuple[str, str]:
    left, sep, right = value.partition("=")
    if not sep or not left.strip() or not right.strip():
        raise argparse.ArgumentTypeError(f"expected OLD=NEW, got '{value}'")
    return left.strip(), right.strip()


def _prefix_arg(value: str) -> Tuple[str, int, str]:
    """
    Parse KEY:POSITION=PREFIX where POSITION is 1-based and PREFIX may be
    empty. KEY may itself contain ":" or "="; POSITION is taken from the
    last ":" whose segment runs up to an "=".
    """
    match = _PREFIX_TARGET.match(value)
    if not match:
        raise argparse.ArgumentTypeError(f"expected KEY:POSITION=PREFIX, got '{value}'")
    key, position, prefix = match.group("key"), match.group("position"), match.group("prefix")
    try:
        index = int(position)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"position must be an integer, got '{position}'") from exc
    if index < 1:
        raise argparse.ArgumentTypeError("position is 1-based")
    return key, index, prefix


def _confirm(message: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _apply_edits(session: Session, args: argparse.Namespace, formatter: CLIFormatter) -> None:
    """
    Apply command-line edits in a fixed order: rename, merge, set-prefix,
    delete-group. Edits that name missing groups or items change nothing.
    """
    for old_key, new_key in args.rename or []:
        before = session.store
        merged = new_key in before and new_key != old_key
        if session.rename_or_merge_group(old_key, new_key) is before:
            if old_key not in before:
                formatter.warning(f"Rename skipped: no group named '{old_key}'")
            else:
                formatter.warning(f"Rename skipped: '{old_key}' already has that name")
        elif merged:
            formatter.muted(f"Merged '{old_key}' into existing '{new_key}'")
        else:
            formatter.muted(f"Renamed '{old_key}' to '{new_key}'")

    for source_key, target_key in args.merge or []:
        before = session.store
        if session.merge_groups(source_key, target_key) is before:
            formatter.warning(f"Merge skipped: '{source_key}' -> '{target_key}'")
        else:
            formatter.muted(f"Merged '{source_key}' into '{target_key}'")

    for key, position, prefix in args.set_prefix or []:
        items = session.store.get(key)
        if not items or position > len(items):
            formatter.warning(f"Prefix skipped: no image {position} in '{key}'")
            continue
        session.set_item_prefix(key, items[position - 1].id, prefix)

    for key in args.delete_group or []:
        if key not in session.store:
            formatter.warning(f"Delete skipped: no group named '{key}'")
            continue
        if _confirm(f'Are you sure you want to delete the entire "{key}" group?', args.yes):
            session.delete_group(key)
            formatter.muted(f"Deleted group '{key}'")


def _render_groups(formatter: CLIFormatter, store: GroupStore, config: NamingConfig) -> None:
    formatter.section(f"{len(store)} group(s), {store.total_items()} image(s)")
    for key, items in store.items():
        size = sum(item.payload.size for item in items)
        formatter.kv(key, f"{len(items)} image(s), {human_readable_size(size)}")
        for position, item in enumerate(items, start=1):
            prefix = effective_prefix(item, config)
            marker = f" [prefix: {prefix or 'none'}]" if item.prefix_override is not None else ""
            formatter.muted(f"{' ' * 6}{position}. {item.filename}{marker}")


def _organize_flow(args: argparse.Namespace, formatter: CLIFormatter, config: NamingConfig) -> int:
    try:
        inputs = importer.read_input_paths(args.paths)
    except InputError as exc:
        formatter.error(f"[ERROR] {exc}")
        return 1

    with Session(config) as session:
        try:
            result = session.load_inputs(inputs)
        except InputError as exc:
            formatter.error(f"[ERROR] {exc}")
            return 1
        if result is not None and result.error_message:
            formatter.warning(result.error_message)
        if not session.pending:
            formatter.error("No supported image files were found.")
            return 1

        session.organize()
        _apply_edits(session, args, formatter)
        if not session.store:
            formatter.warning("Every group was deleted; nothing to export.")
            return 0
        _render_groups(formatter, session.store, config)

        plan = session.plan(args.group)
        if not plan.entries:
            formatter.error(f"[ERROR] No group named '{args.group}'.")
            return 1
        manifest = reporting.write_export_manifest(plan, reporting.artifact_path(MANIFEST_NAME))

        if args.dry_run:
            formatter.section(f"Planned {plan.archive_name}")
            for path in plan.paths:
                formatter.bullet(path)
            formatter.line(f"Manifest: {formatter.link(manifest, MANIFEST_NAME)}")
            return 0

        try:
            if args.group:
                archive = session.export_group(args.group, args.out)
            else:
                archive = session.export_all(args.out)
        except ExportError as exc:
            formatter.error(f"[ERROR] {exc}")
            formatter.muted(f"Log file: {reporting.artifact_path('skufolders.log')}")
            return 1
        if archive is None:
            formatter.error("[ERROR] Export was not started.")
            return 1
        formatter.blank()
        formatter.success(
            f"Exported {len(plan.entries)} image(s) ({human_readable_size(plan.total_size)})"
        )
        formatter.line(f"Archive: {formatter.link(archive, os.path.basename(archive))}")
        formatter.line(f"Manifest: {formatter.link(manifest, MANIFEST_NAME)}")
        return 0


def _keys_flow(filenames: Sequence[str], formatter: CLIFormatter) -> int:
    for filename in filenames:
        formatter.line(f"{filename}\t{group_key_for(filename)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skufolders",
        description="Group product images into SKU folders and export them as zip archives.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Plain mode: ASCII-only output without colors or links.",
    )
    parser.add_argument(
        "--theme",
        choices=["light", "dark"],
        default=None,
        help="Terminal palette (default dark). Also configurable via $SKUFOLDERS_THEME.",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help=(
            "Global filename prefix inserted after the position number (default 'eci'; "
            f"pass '' for none). Also configurable via ${PREFIX_ENV}."
        ),
    )
    parser.add_argument(
        "--thumb-width",
        type=_thumb_width_arg,
        default=None,
        help=(
            f"Preview thumbnail width, {MIN_THUMBNAIL_WIDTH}-{MAX_THUMBNAIL_WIDTH} pixels "
            f"(default 280). Also configurable via ${THUMB_WIDTH_ENV}."
        ),
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before deleting groups.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    organize_parser = subparsers.add_parser(
        "organize",
        help="Group images by SKU/name and export them",
        description=(
            "Import images, directories and .zip archives, group them by SKU or base name, "
            "apply optional edits, and write organized_images.zip (or <group>.zip with --group)."
        ),
    )
    organize_parser.add_argument("paths", nargs="+", help="Image files, folders or .zip archives")
    organize_parser.add_argument("--out", default=".", help="Folder that receives the archive")
    organize_parser.add_argument("--group", default=None, help="Export only this group as a flat archive")
    organize_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the planned archive paths and write the manifest only",
    )
    organize_parser.add_argument(
        "--rename",
        type=_pair_arg,
        action="append",
        metavar="OLD=NEW",
        help="Rename a group; merges into NEW when it already exists",
    )
    organize_parser.add_argument(
        "--merge",
        type=_pair_arg,
        action="append",
        metavar="SRC=DST",
        help="Append every image of SRC to DST",
    )
    organize_parser.add_argument(
        "--set-prefix",
        type=_prefix_arg,
        action="append",
        metavar="KEY:POSITION=PREFIX",
        help="Override the prefix of one image (1-based position; empty PREFIX means none)",
    )
    organize_parser.add_argument(
        "--delete-group",
        action="append",
        metavar="KEY",
        help="Remove a group before exporting",
    )

    keys_parser = subparsers.add_parser("keys", help="Show the group key derived from filenames")
    keys_parser.add_argument("filenames", nargs="+")
    return parser


def main(argv: List[str] | None = None) -> int:
    """
    Argument parser entry point.

    Args:
        argv: Arguments without the program name; defaults to sys.argv[1:].

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    formatter = CLIFormatter(
        detect_terminal_capabilities(
            plain_mode=args.plain,
            no_color_flag=args.no_color,
            theme_preference=args.theme,
        )
    )
    if args.command == "keys":
        return _keys_flow(args.filenames, formatter)

    config = configure_naming(args.prefix, args.thumb_width)
    log_info(
        f"Naming config: prefix='{config.default_prefix}' (source={config.prefix_source}), "
        f"thumbnail width={config.thumbnail_width} (source={config.thumbnail_width_source})"
    )
    return _organize_flow(args, formatter, config)


if __name__ == "__main__":
    sys.exit(main())
