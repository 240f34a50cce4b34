import pytest

from checkout_sim.config import DEFAULTS, apply_overrides


@pytest.fixture
def make_cfg():
    """Build a validated-shape config from DEFAULTS plus nested overrides."""

    def _make(**sections):
        return apply_overrides(DEFAULTS, sections)

    return _make


@pytest.fixture
def point_cfg(make_cfg):
    """One cashier, one item per basket, exactly 1.0s per item, no generator noise."""
    return make_cfg(
        sim={"duration": 10.0, "seed": 1},
        cashiers={"count": 1, "item_time_min": 1.0, "item_time_max": 1.0},
        shop={"items_min": 1, "items_max": 1},
    )
