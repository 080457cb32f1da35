# src/main.py - v3
"""CLI entry point for operating on the file storage by hand.

Usage:
    filestorage stage <upload_session>
    filestorage hashes <upload_dir>
    filestorage delete-queue <upload_dir>
    filestorage cache-lookup <hash> <lang> [--original]
    filestorage promote <date/hash> <lang> <id_file>
    filestorage link-zip <create_date> <zip_hash> <project_id>
    filestorage fast-analysis {get,delete} <project_id>

Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from filestorage.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from filestorage.config.settings import ConfigurationError, load_settings
    from filestorage.core.errors import StorageError
    from filestorage.files_storage import create_files_storage
    from filestorage.logging.logger import setup_logging_from_settings

    try:
        settings = load_settings()
        if args.verbose:
            settings.log_level = "DEBUG"
        setup_logging_from_settings(settings)
        storage = create_files_storage(settings)
        try:
            return args.func(storage, args)
        finally:
            storage.close()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (ConfigurationError, StorageError, ValueError) as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="filestorage",
        description=f"filestorage v{__version__} - content-addressed file storage",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- stage ---
    p_stage = subparsers.add_parser(
        "stage", help="Upload a local upload session to the queue area",
    )
    p_stage.add_argument("session", help="Upload session token")
    p_stage.set_defaults(func=_cmd_stage)

    # --- hashes ---
    p_hashes = subparsers.add_parser(
        "hashes", help="Show the file map recorded for an upload session",
    )
    p_hashes.add_argument("upload_dir", help="Upload directory (last segment = session)")
    p_hashes.set_defaults(func=_cmd_hashes)

    # --- delete-queue ---
    p_delete = subparsers.add_parser(
        "delete-queue", help="Delete every queued object of an upload session",
    )
    p_delete.add_argument("upload_dir", help="Upload directory (last segment = session)")
    p_delete.set_defaults(func=_cmd_delete_queue)

    # --- cache-lookup ---
    p_lookup = subparsers.add_parser(
        "cache-lookup", help="Find the cached work (or original) file",
    )
    p_lookup.add_argument("hash", help="Content hash")
    p_lookup.add_argument("lang", help="Language tag, e.g. it-it")
    p_lookup.add_argument(
        "--original", action="store_true",
        help="Look up the original file instead of the work file",
    )
    p_lookup.set_defaults(func=_cmd_cache_lookup)

    # --- promote ---
    p_promote = subparsers.add_parser(
        "promote", help="Copy a cache package into a project file directory",
    )
    p_promote.add_argument("date_hash_path", help="<datePath>/<hash>")
    p_promote.add_argument("lang", help="Language tag")
    p_promote.add_argument("id_file", help="Project file id")
    p_promote.set_defaults(func=_cmd_promote)

    # --- link-zip ---
    p_link = subparsers.add_parser(
        "link-zip", help="Move a cached zip archive into a project",
    )
    p_link.add_argument("create_date", help="Project creation date (ISO format)")
    p_link.add_argument("zip_hash", help="Archive hash")
    p_link.add_argument("project_id", help="Project id")
    p_link.set_defaults(func=_cmd_link_zip)

    # --- fast-analysis ---
    p_fast = subparsers.add_parser(
        "fast-analysis", help="Read or delete a fast-analysis payload",
    )
    p_fast.add_argument("action", choices=["get", "delete"])
    p_fast.add_argument("project_id", type=int, help="Project id")
    p_fast.set_defaults(func=_cmd_fast_analysis)

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _cmd_stage(storage, args: argparse.Namespace) -> int:
    report = storage.queue.move_file_from_upload_session_to_queue_path(args.session)
    _print_json(report.model_dump())
    return 0 if report.ok else 1


def _cmd_hashes(storage, args: argparse.Namespace) -> int:
    hashes = storage.queue.get_hashes_from_dir(args.upload_dir)
    _print_json(hashes.model_dump(by_alias=True))
    return 0


def _cmd_delete_queue(storage, args: argparse.Namespace) -> int:
    removed = storage.queue.delete_queue(args.upload_dir)
    _print_json({"deleted": removed})
    return 0


def _cmd_cache_lookup(storage, args: argparse.Namespace) -> int:
    if args.original:
        key = storage.cache.get_original_from_cache(args.hash, args.lang)
    else:
        key = storage.cache.get_xliff_from_cache(args.hash, args.lang)
    _print_json({"key": key})
    return 0 if key is not None else 1


def _cmd_promote(storage, args: argparse.Namespace) -> int:
    result = storage.projects.move_from_cache_to_file_dir(
        args.date_hash_path, args.lang, args.id_file,
    )
    _print_json(result.model_dump())
    return 0 if result.ok else 1


def _cmd_link_zip(storage, args: argparse.Namespace) -> int:
    result = storage.zips.link_zip_to_project(args.create_date, args.zip_hash, args.project_id)
    _print_json(result.model_dump())
    return 0 if result.ok else 1


def _cmd_fast_analysis(storage, args: argparse.Namespace) -> int:
    if args.action == "get":
        _print_json(storage.fast_analysis.get_fast_analysis_data(args.project_id))
    else:
        storage.fast_analysis.delete_fast_analysis_file(args.project_id)
        _print_json({"deleted": args.project_id})
    return 0


if __name__ == "__main__":
    sys.exit(main())
