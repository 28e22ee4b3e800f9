"""Test configuration for tincture."""

import pytest

import tincture_colorengine


@pytest.fixture(autouse=True)
def fast_kernels():
    """Every test starts (and ends) on the default fast kernels."""
    tincture_colorengine.set_strict_ieee(False)
    yield
    tincture_colorengine.set_strict_ieee(False)
