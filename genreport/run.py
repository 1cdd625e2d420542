"""
genreport/run.py

End-to-end orchestrator for generation report processing.

Responsibilities
----------------
- Run one report through extract -> calculate -> write (`process_file`).
- Contain per-file failures so a bad report never stops the watcher
  (`handle_file`).
- Process the reports already sitting in the input folder
  (`process_directory`), e.g. for one-off runs.
- Expose a CLI that loads settings and reference factors once, then either
  processes the input folder and exits (`--once`) or watches it.

Conventions
-----------
- Reference factors are loaded a single time at startup and shared,
  read-only, by every file processed during the run.
- A failed file is logged and skipped; it is not retried.
"""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

from .calculate import calculate
from .config import load_settings
from .errors import GenerationReportError, ReferenceDataError
from .extract import read_observations
from .reference import ReferenceFactors, load_reference_factors
from .watch import INPUT_PATTERN, is_report, watch
from .write import write_report

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def process_file(path: str | Path, output_dir: str | Path, factors: ReferenceFactors) -> Path:
    """Process a single report and write its result document.

    Args:
        path: Input report.
        output_dir: Folder receiving the result document.
        factors: Reference factors for the calculation.

    Returns:
        Path: The written result document.

    Raises:
        MalformedInputError: If the report cannot be parsed.
        ComputationError: If a derived metric cannot be computed.
        OSError: If reading the report or writing the result fails.
    """
    logger.info("Processing file: %s", path)
    observations = read_observations(path)
    result = calculate(observations, factors)
    return write_report(result, path, output_dir)


def handle_file(
    path: str | Path, output_dir: str | Path, factors: ReferenceFactors
) -> Path | None:
    """Process `path`, logging instead of raising per-file failures.

    Returns:
        Path | None: The result document, or None if processing failed.
    """
    try:
        return process_file(path, output_dir, factors)
    except (GenerationReportError, OSError) as exc:
        logger.error("Error processing file %s: %s", path, exc)
        return None


def process_directory(
    input_dir: str | Path, output_dir: str | Path, factors: ReferenceFactors
) -> dict[str, int]:
    """Process every report currently in `input_dir`, in name order.

    Returns:
        dict[str, int]: {"processed": <successes>, "failed": <failures>}
    """
    processed = failed = 0
    for path in sorted(Path(input_dir).glob(INPUT_PATTERN)):
        if not is_report(path):
            continue
        if handle_file(path, output_dir, factors) is None:
            failed += 1
        else:
            processed += 1
    return {"processed": processed, "failed": failed}


def main(argv=None):
    """CLI entry point.

    Args:
        argv: Optional list of CLI arguments (useful for testing).

    Returns:
        int: Exit code (0 on success, 1 if the watcher stopped on its own,
        2 on configuration or reference data errors).
    """
    parser = argparse.ArgumentParser(description="Process generation reports")
    parser.add_argument("--input-folder", help="Folder watched for reports")
    parser.add_argument("--output-folder", help="Folder receiving result documents")
    parser.add_argument("--reference-data", help="Reference factors XML file")
    parser.add_argument("--log-level")
    parser.add_argument(
        "--once", action="store_true", help="Process existing reports and exit"
    )
    args = parser.parse_args(argv)

    settings = load_settings(
        input_folder=args.input_folder,
        output_folder=args.output_folder,
        reference_data=args.reference_data,
        log_level=args.log_level,
    )
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    try:
        factors = load_reference_factors(settings.reference_data)
    except ReferenceDataError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    if args.once:
        stats = process_directory(settings.input_folder, settings.output_folder, factors)
        print(f"Done. Stats: {stats}")
        return 0

    interrupted = watch(
        settings.input_folder,
        partial(handle_file, output_dir=settings.output_folder, factors=factors),
    )
    return 0 if interrupted else 1


if __name__ == "__main__":
    # Convert the `main()` return value into a process exit status.
    raise SystemExit(main())
