"""
genreport/extract.py

Extraction and typing layer for incoming generation reports.

Responsibilities
----------------
- Define the `Generator` model for generator-level attributes (name, type,
  emissions rating, heat input, net generation), read once per generator.
- Define the `GeneratorObservation` model: one generator's values for one
  day, referencing its shared `Generator`.
- Provide `read_observations` to turn an XML report into the flat list of
  observations consumed by `genreport.calculate`.

Conventions
-----------
- Generators are collected by type: all wind generators first, then gas,
  then coal, each in document order.
- The generator type comes from the element tag (`WindGenerator`, ...),
  never from the generator's name.
- Optional attributes that are absent or empty become None, not zero.
- Dates without an explicit UTC offset are taken as UTC.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path

from dateutil import parser as dtp
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import MalformedInputError

logger = logging.getLogger(__name__)

REPORT_TAG = "GenerationReport"


class GeneratorType(str, Enum):
    """Generator fuel class, taken from the report element a generator sits in."""

    WIND = "Wind"
    GAS = "Gas"
    COAL = "Coal"


# Element tag for each generator type, in extraction order.
GENERATOR_TAGS = {
    GeneratorType.WIND: "WindGenerator",
    GeneratorType.GAS: "GasGenerator",
    GeneratorType.COAL: "CoalGenerator",
}


class Generator(BaseModel):
    """Generator-level attributes shared by all of a generator's days.

    Attributes:
        name: Identity string, e.g. "Wind[Offshore]" or "Coal[1]".
        generator_type: Wind, Gas or Coal.
        emission_rating: Present for gas and coal generators.
        total_heat_input: Present for coal generators.
        actual_net_generation: Present for coal generators.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    generator_type: GeneratorType
    emission_rating: Decimal | None = None
    total_heat_input: Decimal | None = None
    actual_net_generation: Decimal | None = None


class GeneratorObservation(BaseModel):
    """One generator's reported energy and price for one day."""

    model_config = ConfigDict(frozen=True)

    generator: Generator
    date: datetime
    energy: Decimal = Field(ge=0)
    price: Decimal

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        """Parse ISO-8601 strings into aware datetimes, defaulting to UTC."""
        if isinstance(v, str):
            v = dtp.isoparse(v)
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def name(self) -> str:
        return self.generator.name

    @property
    def generator_type(self) -> GeneratorType:
        return self.generator.generator_type

    @property
    def emission_rating(self) -> Decimal | None:
        return self.generator.emission_rating

    @property
    def total_heat_input(self) -> Decimal | None:
        return self.generator.total_heat_input

    @property
    def actual_net_generation(self) -> Decimal | None:
        return self.generator.actual_net_generation


def _text(element: ET.Element, tag: str) -> str | None:
    """Return the stripped text of child `tag`, or None if absent or blank."""
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def parse_document(path: str | Path) -> ET.Element:
    """Parse an XML report and return its root element.

    Raises:
        MalformedInputError: If the file is not well-formed XML.
        OSError: If the file cannot be read.
    """
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise MalformedInputError(f"{path} is not well-formed XML: {exc}") from exc


def find_report(root: ET.Element) -> ET.Element:
    if root.tag == REPORT_TAG:
        return root
    report = root.find(f".//{REPORT_TAG}")
    if report is None:
        raise MalformedInputError(f"document has no <{REPORT_TAG}> element")
    return report


def read_generator(element: ET.Element, generator_type: GeneratorType) -> Generator:
    """Read the generator-level attributes of one generator element.

    Raises:
        MalformedInputError: If `Name` is missing or an optional numeric
            attribute is present but not a finite decimal.
    """
    name = _text(element, "Name")
    if name is None:
        raise MalformedInputError(f"<{element.tag}> is missing required field 'Name'")

    try:
        return Generator(
            name=name,
            generator_type=generator_type,
            emission_rating=_text(element, "EmissionsRating"),
            total_heat_input=_text(element, "TotalHeatInput"),
            actual_net_generation=_text(element, "ActualNetGeneration"),
        )
    except ValidationError as exc:
        raise MalformedInputError(f"generator {name!r}: {_describe(exc)}") from exc


def read_days(element: ET.Element, generator: Generator) -> list[GeneratorObservation]:
    """Build one observation per `Generation/Day` entry of `element`.

    Raises:
        MalformedInputError: If a day lacks `Date`, `Energy` or `Price`, or
            one of them cannot be parsed.
    """
    observations = []
    for index, day in enumerate(element.findall("Generation/Day"), start=1):
        try:
            observations.append(
                GeneratorObservation(
                    generator=generator,
                    date=_text(day, "Date"),
                    energy=_text(day, "Energy"),
                    price=_text(day, "Price"),
                )
            )
        except ValidationError as exc:
            raise MalformedInputError(
                f"generator {generator.name!r}, day {index}: {_describe(exc)}"
            ) from exc
    return observations


def extract_observations(root: ET.Element) -> list[GeneratorObservation]:
    """Flatten a parsed report into per-generator, per-day observations.

    Args:
        root: Root element of the input document.

    Returns:
        list[GeneratorObservation]: Wind, then gas, then coal observations.

    Raises:
        MalformedInputError: On a missing report element or any missing or
            untypeable required field.
    """
    report = find_report(root)
    observations: list[GeneratorObservation] = []

    for generator_type, tag in GENERATOR_TAGS.items():
        for element in report.iter(tag):
            generator = read_generator(element, generator_type)
            observations.extend(read_days(element, generator))

    logger.debug("Extracted %d observations", len(observations))
    return observations


def read_observations(path: str | Path) -> list[GeneratorObservation]:
    """Parse `path` and return its observations."""
    return extract_observations(parse_document(path))
