"""
genreport/calculate.py

Calculation engine turning generator observations into the three derived
views written to the result document.

Responsibilities
----------------
- `generator_totals`: revenue per generator,
  sum of energy * price * value factor across its days.
- `max_emission_generators`: for each reported timestamp, the generator with
  the highest energy * emissions rating * emission factor.
- `actual_heat_rates`: total heat input / actual net generation per coal
  generator.
- `calculate`: run all three and assemble a `GenerationResult`.

Conventions
-----------
- All arithmetic uses `Decimal`; no value passes through binary floats.
- Groups are emitted in the order their key is first seen in the input.
- Equal maximum emissions on a date are resolved in favour of the lowest
  generator name, then the earliest observation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable
from datetime import datetime
from decimal import Decimal, DecimalException
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from .errors import ComputationError
from .extract import GeneratorObservation, GeneratorType
from .factors import emission_factor, value_factor
from .reference import ReferenceFactors

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


class GeneratorTotal(BaseModel):
    """Revenue total for one generator.

    Attributes:
        name: Generator identity string.
        total: Sum of energy * price * value factor over its days.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    total: Decimal


class DailyMaxEmission(BaseModel):
    """Highest-emitting generator for one reported timestamp.

    Attributes:
        name: Winning generator.
        date: The timestamp shared by the competing observations.
        emission: Energy * emissions rating * emission factor of the winner.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    date: datetime
    emission: Decimal


class ActualHeatRate(BaseModel):
    """Total heat input / actual net generation for one coal generator."""

    model_config = ConfigDict(frozen=True)

    name: str
    heat_rate: Decimal


class GenerationResult(BaseModel):
    """The three sections of a result document, in output order."""

    model_config = ConfigDict(frozen=True)

    totals: list[GeneratorTotal]
    max_emission_generators: list[DailyMaxEmission]
    actual_heat_rates: list[ActualHeatRate]


def group_by(
    observations: Iterable[GeneratorObservation],
    key: Callable[[GeneratorObservation], K],
) -> dict[K, list[GeneratorObservation]]:
    """Group observations by `key`, keeping first-seen key order."""
    groups: dict[K, list[GeneratorObservation]] = {}
    for obs in observations:
        groups.setdefault(key(obs), []).append(obs)
    return groups


def emission(obs: GeneratorObservation, factors: ReferenceFactors) -> Decimal:
    """Energy * emissions rating * emission factor for one observation.

    Raises:
        ComputationError: If the product falls outside the decimal context.
    """
    try:
        return obs.energy * obs.emission_rating * emission_factor(factors, obs.name)
    except DecimalException as exc:
        raise ComputationError(f"cannot compute emission for {obs.name!r}: {exc!r}") from exc


def generator_totals(
    observations: Iterable[GeneratorObservation], factors: ReferenceFactors
) -> list[GeneratorTotal]:
    """Sum energy * price * value factor per generator name.

    Unknown generator names have a value factor of 0 and so total 0.

    Raises:
        ComputationError: If a product or the sum falls outside the decimal
            context.
    """
    totals = []
    for name, group in group_by(observations, lambda o: o.name).items():
        factor = value_factor(factors, name)
        try:
            total = sum((o.energy * o.price * factor for o in group), Decimal(0))
        except DecimalException as exc:
            raise ComputationError(f"cannot compute total for {name!r}: {exc!r}") from exc
        totals.append(GeneratorTotal(name=name, total=total))
    return totals


def max_emission_generators(
    observations: Iterable[GeneratorObservation], factors: ReferenceFactors
) -> list[DailyMaxEmission]:
    """Pick the highest-emitting generator for each reported timestamp.

    Only observations with an emissions rating take part. Dates are grouped
    on the full timestamp, not the calendar day.

    Args:
        observations: Flat observation sequence.
        factors: Reference factors supplying the emission tiers.

    Returns:
        list[DailyMaxEmission]: One entry per distinct timestamp.
    """
    rated = [o for o in observations if o.emission_rating is not None]
    result = []

    for date, group in group_by(rated, lambda o: o.date).items():
        best = None
        best_emission = Decimal(0)
        for obs in group:
            value = emission(obs, factors)
            if (
                best is None
                or value > best_emission
                or (value == best_emission and obs.name < best.name)
            ):
                best, best_emission = obs, value
        result.append(DailyMaxEmission(name=best.name, date=best.date, emission=best_emission))

    return result


def actual_heat_rates(observations: Iterable[GeneratorObservation]) -> list[ActualHeatRate]:
    """Compute total heat input / actual net generation per coal generator.

    Both inputs are generator-level attributes repeated on every day, so the
    first observation of each generator is used.

    Raises:
        ComputationError: If a generator's actual net generation is zero.
    """
    coal = [
        o
        for o in observations
        if o.generator_type is GeneratorType.COAL
        and o.total_heat_input is not None
        and o.actual_net_generation is not None
    ]

    rates = []
    for name, group in group_by(coal, lambda o: o.name).items():
        first = group[0]
        if first.actual_net_generation == 0:
            raise ComputationError(f"generator {name!r} has zero actual net generation")
        try:
            heat_rate = first.total_heat_input / first.actual_net_generation
        except DecimalException as exc:
            raise ComputationError(f"cannot compute heat rate for {name!r}: {exc!r}") from exc
        rates.append(ActualHeatRate(name=name, heat_rate=heat_rate))
    return rates


def calculate(
    observations: Iterable[GeneratorObservation], factors: ReferenceFactors
) -> GenerationResult:
    """Compute all result sections for one report."""
    observations = list(observations)
    result = GenerationResult(
        totals=generator_totals(observations, factors),
        max_emission_generators=max_emission_generators(observations, factors),
        actual_heat_rates=actual_heat_rates(observations),
    )
    logger.debug(
        "Calculated %d totals, %d max-emission days, %d heat rates",
        len(result.totals),
        len(result.max_emission_generators),
        len(result.actual_heat_rates),
    )
    return result
