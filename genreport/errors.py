"""
genreport/errors.py

Exception hierarchy raised by the report processing pipeline.

Per-file failures (`MalformedInputError`, `ComputationError`, and the builtin
`OSError`) are caught at the file-processing boundary in `genreport.run`.
`ReferenceDataError` is fatal to the whole run.
"""

from __future__ import annotations


class GenerationReportError(Exception):
    """Base class for all pipeline errors."""


class MalformedInputError(GenerationReportError):
    """A required field is missing or cannot be parsed in an input report."""


class ReferenceDataError(GenerationReportError):
    """The reference factors file is missing or malformed."""


class ComputationError(GenerationReportError):
    """A derived metric cannot be computed (e.g. division by zero)."""
