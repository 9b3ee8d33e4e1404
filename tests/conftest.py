import pytest

from tests.utils import make_config


@pytest.fixture
def default_config():
    return make_config()


@pytest.fixture
def scenario_config():
    """Local pool of four, a single foreign teacher."""
    def build(b_round1: int, b_round2: int = 3):
        return make_config(local=["A", "B", "C", "D"], foreign=["F1"],
                           group_b={1: b_round1, 2: b_round2}, max_homerooms=None)
    return build
