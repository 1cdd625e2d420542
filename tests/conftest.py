"""Pytest configuration and fixtures shared across the test suite."""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure the project root is on sys.path so ``import genreport`` works when
# running the test suite without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from genreport.extract import Generator, GeneratorObservation, GeneratorType  # noqa: E402
from genreport.reference import FactorTiers, ReferenceFactors  # noqa: E402

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def factors() -> ReferenceFactors:
    """Factors matching ``tests/data/ReferenceData.xml``."""
    return ReferenceFactors(
        value_factor=FactorTiers(high=Decimal("1.2"), medium=Decimal("0.5"), low=Decimal("0.25")),
        emission_factor=FactorTiers(high=Decimal("2"), medium=Decimal("1"), low=Decimal("0.5")),
    )


@pytest.fixture
def make_observation():
    """Factory building an observation with a fresh generator."""

    def _make(
        name,
        date,
        energy,
        price="1",
        generator_type=GeneratorType.GAS,
        emission_rating=None,
        total_heat_input=None,
        actual_net_generation=None,
    ):
        generator = Generator(
            name=name,
            generator_type=generator_type,
            emission_rating=emission_rating,
            total_heat_input=total_heat_input,
            actual_net_generation=actual_net_generation,
        )
        return GeneratorObservation(generator=generator, date=date, energy=energy, price=price)

    return _make
