"""Generation report processing: extract, calculate and write result documents."""

from . import calculate, config, errors, extract, factors, reference, run, watch, write

__all__ = [
    "calculate",
    "config",
    "errors",
    "extract",
    "factors",
    "reference",
    "run",
    "watch",
    "write",
]
