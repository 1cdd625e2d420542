"""
genreport/write.py

Output layer for the report processing pipeline.

Responsibilities
----------------
- Derive the result file name from the input file name
  (`report.xml` -> `report-Result.xml`).
- Serialise a `GenerationResult` into the `GenerationOutput` XML document.
- Persist the document atomically: the XML is written to a temporary file in
  the output directory and renamed onto the final name, so a failed write
  never leaves a partial result behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from .calculate import GenerationResult

logger = logging.getLogger(__name__)

RESULT_SUFFIX = "-Result"


def output_path_for(input_path: str | Path, output_dir: str | Path) -> Path:
    """Return the result path for `input_path` inside `output_dir`."""
    input_path = Path(input_path)
    return Path(output_dir) / f"{input_path.stem}{RESULT_SUFFIX}{input_path.suffix}"


def format_timestamp(value: datetime) -> str:
    """Format as `YYYY-MM-DDTHH:MM:SS+HH:MM`."""
    return value.isoformat(timespec="seconds")


def format_decimal(value: Decimal) -> str:
    """Fixed-point text keeping the scale, e.g. `0E-7` -> `0.0000000`."""
    return format(value, "f")


def _add(parent: ET.Element, tag: str, text) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = format_decimal(text) if isinstance(text, Decimal) else str(text)
    return child


def build_document(result: GenerationResult) -> ET.ElementTree:
    """Build the `GenerationOutput` document for `result`.

    Decimals are written in fixed-point notation with their scale preserved.
    """
    root = ET.Element("GenerationOutput")

    totals = ET.SubElement(root, "Totals")
    for item in result.totals:
        generator = ET.SubElement(totals, "Generator")
        _add(generator, "Name", item.name)
        _add(generator, "Total", item.total)

    max_emissions = ET.SubElement(root, "MaxEmissionGenerators")
    for item in result.max_emission_generators:
        day = ET.SubElement(max_emissions, "Day")
        _add(day, "Name", item.name)
        _add(day, "Date", format_timestamp(item.date))
        _add(day, "Emission", item.emission)

    heat_rates = ET.SubElement(root, "ActualHeatRates")
    for item in result.actual_heat_rates:
        rate = ET.SubElement(heat_rates, "ActualHeatRate")
        _add(rate, "Name", item.name)
        _add(rate, "HeatRate", item.heat_rate)

    tree = ET.ElementTree(root)
    ET.indent(tree)
    return tree


def _file_mode() -> int:
    """Permissions a plain `open()` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_report(
    result: GenerationResult, input_path: str | Path, output_dir: str | Path
) -> Path:
    """Write `result` next to its siblings in `output_dir`.

    Args:
        result: Calculated result sections.
        input_path: The input report; only its name is used.
        output_dir: Destination directory, created if it does not exist.

    Returns:
        Path: Location of the written result document.

    Raises:
        OSError: If the directory or file cannot be written. The temporary
            file is removed before the error propagates.
    """
    target = output_path_for(input_path, output_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    tree = build_document(result)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            tree.write(f, encoding="utf-8", xml_declaration=True)
        os.chmod(tmp_name, _file_mode())
        os.replace(tmp_name, target)
    except BaseException:
        # Never leave the temporary file behind.
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Output saved to %s", target)
    return target
