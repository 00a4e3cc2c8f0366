"""
reportproc/run.py

End-to-end orchestrator for the generation report processor.

Responsibilities
----------------
- Build `Settings` once from the environment and CLI flags.
- Load the reference data factor tables once.
- Process every file already in the input folder, then keep watching the
  folder and process each new file as it becomes ready.
- For each file: read, transform, render and write `<name>-Result.xml`.

Conventions
-----------
- A failure while processing one file is logged and never stops the loop.
- Missing configuration or missing folders abort startup with exit code 2;
  unreadable reference data aborts with exit code 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lxml import etree

from .config import Settings
from .errors import ConfigError, GenerationReportError
from .load import RESULT_SUFFIX, build_output_document, output_path, write_output
from .reference import FactorTables, load_reference_file
from .transform import build_report
from .validate import read_xml
from .watch import FolderWatch, iter_existing

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def process_file(path: str | Path, factors: FactorTables, output_folder: str | Path) -> Path | None:
    """Transform one input file and write its result document.

    Args:
        path: Input XML file.
        factors: Factor tables loaded from the reference data.
        output_folder: Folder the result is written to.

    Returns:
        Path | None: The written result path, or None if the file could not
        be processed (the reason is logged).
    """
    try:
        report = build_report(read_xml(path), factors)
        return write_output(build_output_document(report), output_path(path, output_folder))
    except (GenerationReportError, OSError, etree.XMLSyntaxError) as exc:
        LOGGER.error("Error processing file %s: %s", Path(path).name, exc)
        return None


def _is_own_result(path: Path, settings: Settings) -> bool:
    # With input and output in one folder, result files must not be fed back in.
    return path.name.endswith(RESULT_SUFFIX) and path.parent.resolve() == settings.output_folder.resolve()


def _consume(paths, settings: Settings, factors: FactorTables, handled: set[Path] | None = None) -> dict[str, int]:
    stats = {"processed": 0, "failed": 0}
    for path in paths:
        # Record every path taken from the source, whatever the outcome, so a
        # later watch does not pick it up again.
        if handled is not None:
            handled.add(path)
        if _is_own_result(path, settings):
            LOGGER.debug("Ignoring result file %s", path.name)
            continue
        if process_file(path, factors, settings.output_folder) is None:
            stats["failed"] += 1
        else:
            stats["processed"] += 1
    return stats


def process_existing(
    settings: Settings,
    factors: FactorTables,
    handled: set[Path] | None = None,
) -> dict[str, int]:
    """Process every file already present in the input folder.

    Args:
        settings: Processor settings.
        factors: Factor tables loaded from the reference data.
        handled: Optional set that receives every path this scan consumed;
            pass it on to :func:`watch_and_process` as `seen`.

    Returns:
        dict[str, int]: {"processed": <files written>, "failed": <files skipped>}
    """
    LOGGER.info("Processing existing files...")
    return _consume(iter_existing(settings.input_folder), settings, factors, handled)


def watch_and_process(
    settings: Settings,
    factors: FactorTables,
    max_polls: int | None = None,
    seen: set[Path] | None = None,
) -> dict[str, int]:
    """Watch the input folder and process new files until interrupted.

    Args:
        settings: Processor settings.
        factors: Factor tables loaded from the reference data.
        max_polls: Optional bound on the number of folder polls.
        seen: Paths the startup scan already handled. Any other file found
            on the first poll, including one that arrived during the scan,
            is processed as new.

    Returns:
        dict[str, int]: Same shape as :func:`process_existing`.
    """
    LOGGER.info("Monitoring %s for %s files...", settings.input_folder, settings.file_pattern)
    watch = FolderWatch(
        settings.input_folder,
        pattern=settings.file_pattern,
        poll_interval=settings.poll_interval,
        max_polls=max_polls,
        seen=seen,
    )
    return _consume(watch, settings, factors)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Watch a folder and produce generation reports")
    parser.add_argument("--input-folder", help="Overrides INPUT_FOLDER")
    parser.add_argument("--output-folder", help="Overrides OUTPUT_FOLDER")
    parser.add_argument("--reference-data", help="Overrides REFERENCE_DATA")
    parser.add_argument("--pattern", dest="file_pattern", help="Glob for watched files")
    parser.add_argument("--poll-interval", type=float, help="Seconds between folder polls")
    parser.add_argument("--log-level", help="Logging level name")
    parser.add_argument("--once", action="store_true", help="Process existing files and exit")
    return parser


def main(argv=None):
    """CLI entry point for the processor.

    Args:
        argv: Optional list of CLI arguments (useful for testing).

    Returns:
        int: Exit code (0 on success or Ctrl-C, 1 if the reference data
        cannot be loaded, 2 on bad configuration or missing folders).
    """
    args = build_parser().parse_args(argv)
    overrides = {
        "input_folder": args.input_folder,
        "output_folder": args.output_folder,
        "reference_data": args.reference_data,
        "file_pattern": args.file_pattern,
        "poll_interval": args.poll_interval,
        "log_level": args.log_level,
    }

    try:
        settings = Settings.from_env(overrides=overrides)
    except (ConfigError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if not settings.check_folders():
        print("ERROR: Input or Output folder does not exist.", file=sys.stderr)
        return 2

    try:
        factors = load_reference_file(settings.reference_data)
    except (GenerationReportError, OSError, etree.XMLSyntaxError) as exc:
        LOGGER.error("Error in initialising application: %s", exc)
        return 1

    handled: set[Path] = set()
    stats = process_existing(settings, factors, handled=handled)
    LOGGER.info("Existing files done. Stats: %s", stats)
    if args.once:
        return 0

    try:
        watch_and_process(settings, factors, seen=handled)
    except KeyboardInterrupt:
        LOGGER.info("Stopped watching.")
    return 0


if __name__ == "__main__":
    # Convert the `main()` return value into a process exit status.
    raise SystemExit(main())
