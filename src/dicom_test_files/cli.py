"""dicom-test-files command-line interface."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dicom_test_files import __version__
from dicom_test_files.errors import DicomTestFilesError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dicom-test-files",
        description="Download and cache DICOM files for testing.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"dicom-test-files {__version__}",
    )
    parser.add_argument(
        "--registry",
        type=Path,
        default=None,
        metavar="FILE",
        help="Registry manifest to use  [default: packaged registry]",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Cache directory  [default: target/dicom_test_files]",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging.",
    )

    sub = parser.add_subparsers(dest="command")

    # -- fetch --------------------------------------------------------------
    fetch_parser = sub.add_parser("fetch", help="Fetch files and print their paths.")
    fetch_parser.add_argument("names", nargs="+", metavar="NAME")

    # -- list ---------------------------------------------------------------
    list_parser = sub.add_parser("list", help="Show registered files.")
    list_parser.add_argument(
        "--cached",
        action="store_true",
        help="Show only files already in the cache.",
    )

    # -- hash ---------------------------------------------------------------
    hash_parser = sub.add_parser(
        "hash", help="Generate a registry manifest from a data directory."
    )
    hash_parser.add_argument("data_dir", type=Path, metavar="DATA_DIR")
    hash_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the manifest to FILE instead of stdout.",
    )

    # -- dispatch -----------------------------------------------------------
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "fetch":
            return _cmd_fetch(args)
        if args.command == "list":
            return _cmd_list(args)
        if args.command == "hash":
            return _cmd_hash(args)
    except (DicomTestFilesError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


# ---------------------------------------------------------------------------
# Subcommand implementations
# ---------------------------------------------------------------------------


def _make_fetcher(args: argparse.Namespace):
    """Build a fetcher honouring ``--registry`` and ``--cache-dir``."""
    from dicom_test_files.cache import default_cache_dir
    from dicom_test_files.config import Settings
    from dicom_test_files.fetch import Fetcher
    from dicom_test_files.registry import load_registry

    settings = Settings.from_env()
    registry = load_registry(args.registry or settings.registry)
    cache_dir = args.cache_dir or default_cache_dir(settings)
    return Fetcher(registry, cache_dir, settings=settings)


def _cmd_fetch(args: argparse.Namespace) -> int:
    """Fetch each named file and print its local path."""
    with _make_fetcher(args) as fetcher:
        for name in args.names:
            print(fetcher.path(name))
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    """Print registered files."""
    with _make_fetcher(args) as fetcher:
        entries = list(fetcher.registry)
        if args.cached:
            entries = [e for e in entries if fetcher.is_cached(e.name)]
            if not entries:
                print("No files cached. Run 'dicom-test-files fetch NAME' to download one.")
                return 0

        for e in entries:
            marker = "*" if fetcher.is_cached(e.name) else " "
            zst = " (zstd)" if e.compression.suffix else ""
            print(f"  {marker} {e.name}{zst}")
        print()
        print(f"  * = cached in {fetcher.cache_dir}")
    return 0


def _cmd_hash(args: argparse.Namespace) -> int:
    """Write a registry manifest for a data directory."""
    from dicom_test_files.generate import manifest_json, scan_directory, write_manifest

    entries = scan_directory(args.data_dir)
    if args.output is None:
        sys.stdout.write(manifest_json(entries))
    else:
        write_manifest(entries, args.output)
        print(f"Wrote {args.output}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
