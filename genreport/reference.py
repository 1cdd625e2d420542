"""
genreport/reference.py

Reference factor table used by the calculation engine.

Responsibilities
----------------
- Define a strongly-typed `ReferenceFactors` model holding the value and
  emission factor tiers (High / Medium / Low) as exact decimals.
- Provide `load_reference_factors` to read and validate the side XML file.

Expected document shape
-----------------------
    <ReferenceData>
      <Factors>
        <ValueFactor><High>..</High><Medium>..</Medium><Low>..</Low></ValueFactor>
        <EmissionsFactor><High>..</High><Medium>..</Medium><Low>..</Low></EmissionsFactor>
      </Factors>
    </ReferenceData>

Notes
-----
- Any problem reading or validating the file is reported as
  `ReferenceDataError`; without factors no calculation is meaningful.
- The loaded model is frozen and may be shared freely between threads.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from decimal import Decimal
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ReferenceDataError

logger = logging.getLogger(__name__)

# XML element names for each factor block.
VALUE_FACTOR_TAG = "ValueFactor"
EMISSION_FACTOR_TAG = "EmissionsFactor"


class Tier(str, Enum):
    """Factor tiers as they are named in the reference document."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FactorTiers(BaseModel):
    """One factor block with its three tiers."""

    model_config = ConfigDict(frozen=True)

    high: Decimal
    medium: Decimal
    low: Decimal

    def get(self, tier: Tier) -> Decimal:
        """Return the multiplier for `tier`."""
        return getattr(self, tier.name.lower())


class ReferenceFactors(BaseModel):
    """Value and emission factor tables, immutable for the life of a run."""

    model_config = ConfigDict(frozen=True)

    value_factor: FactorTiers
    emission_factor: FactorTiers


def _read_tiers(factors: ET.Element, tag: str) -> dict[str, str | None]:
    block = factors.find(tag)
    if block is None:
        raise ReferenceDataError(f"reference data is missing the <{tag}> block")

    tiers = {}
    for tier in Tier:
        child = block.find(tier.value)
        tiers[tier.name.lower()] = child.text.strip() if child is not None and child.text else None
    return tiers


def load_reference_factors(path: str | Path) -> ReferenceFactors:
    """Load and validate reference factors from an XML file.

    Args:
        path: Location of the reference data document.

    Returns:
        ReferenceFactors: The validated factor tables.

    Raises:
        ReferenceDataError: If the file cannot be read, is not well-formed
            XML, lacks the `Factors` section or one of its blocks, or holds a
            tier value that is not a finite decimal.
    """
    path = Path(path)
    try:
        root = ET.parse(path).getroot()
    except (OSError, ET.ParseError) as exc:
        raise ReferenceDataError(f"cannot read reference data {path}: {exc}") from exc

    factors = root if root.tag == "Factors" else root.find(".//Factors")
    if factors is None:
        raise ReferenceDataError(f"reference data {path} has no <Factors> section")

    try:
        reference = ReferenceFactors(
            value_factor=_read_tiers(factors, VALUE_FACTOR_TAG),
            emission_factor=_read_tiers(factors, EMISSION_FACTOR_TAG),
        )
    except ValidationError as exc:
        raise ReferenceDataError(f"invalid reference data {path}: {exc}") from exc

    logger.info("Loaded reference factors from %s", path)
    return reference
