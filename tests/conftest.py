"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from immosim.calculations.cashflow import Property, project_cashflow
from tests.fixtures.test_inputs import (
    get_example_inputs,
    get_example_tax_context,
    get_cash_inputs,
    get_two_tranche_inputs,
    get_profitable_inputs,
    get_band_crossing_context,
)


@pytest.fixture
def example_inputs():
    """Get the reference apartment inputs."""
    return get_example_inputs()


@pytest.fixture
def tax_context():
    """Get the reference household: 70,000 single, no church tax."""
    return get_example_tax_context()


@pytest.fixture
def example_property(example_inputs):
    """Reference apartment with derived purchase and ongoing figures."""
    return Property.from_inputs(example_inputs)


@pytest.fixture
def example_projection(example_property, tax_context):
    """Ten-year projection of the reference apartment."""
    return project_cashflow(example_property, tax_context, 10)


@pytest.fixture
def cash_inputs():
    """Get the reference apartment bought in cash."""
    return get_cash_inputs()


@pytest.fixture
def two_tranche_inputs():
    """Get the reference apartment financed with two loans."""
    return get_two_tranche_inputs()


@pytest.fixture
def profitable_inputs():
    """Get a cash unit with positive taxable income."""
    return get_profitable_inputs()


@pytest.fixture
def band_crossing_context():
    """Get a household whose base income sits just below the 42 % band."""
    return get_band_crossing_context()
