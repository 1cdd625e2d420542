"""
genreport/factors.py

Mapping layer from generator names to reference factor tiers.

Responsibilities
----------------
- Define `VALUE_FACTOR_TIERS` and `EMISSION_FACTOR_TIERS`, translating
  generator identity strings to the tier that applies to them.
- Provide `value_factor` and `emission_factor` for the calculation engine.

Names missing from a table resolve to a factor of 0 rather than an error, so
an unrecognised generator contributes nothing to the aggregates.
"""

from __future__ import annotations

from decimal import Decimal

from .reference import ReferenceFactors, Tier

# Generator name -> value factor tier.
VALUE_FACTOR_TIERS = {
    "Wind[Offshore]": Tier.LOW,
    "Wind[Onshore]": Tier.HIGH,
    "Gas[1]": Tier.MEDIUM,
    "Coal[1]": Tier.MEDIUM,
}

# Generator name -> emission factor tier. Wind generators do not emit.
EMISSION_FACTOR_TIERS = {
    "Gas[1]": Tier.MEDIUM,
    "Coal[1]": Tier.HIGH,
}

ZERO = Decimal(0)


def value_factor(factors: ReferenceFactors, name: str) -> Decimal:
    """Return the value factor for generator `name`, or 0 if unknown."""
    tier = VALUE_FACTOR_TIERS.get(name)
    return factors.value_factor.get(tier) if tier is not None else ZERO


def emission_factor(factors: ReferenceFactors, name: str) -> Decimal:
    """Return the emission factor for generator `name`, or 0 if unknown."""
    tier = EMISSION_FACTOR_TIERS.get(name)
    return factors.emission_factor.get(tier) if tier is not None else ZERO
