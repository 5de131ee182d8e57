"""
Pytest fixtures for the settlement tests
"""

import pytest

from Backend.fee_schedule import make_schedule
from Backend.records import Entrant


@pytest.fixture
def scenario_b_schedule():
    """600 buy-in, 100 admin, 100 stake pool split 50/30/20"""
    return make_schedule(600, 100, 100, (50, 30, 20))


@pytest.fixture
def scenario_b_entrants():
    return [
        Entrant("P1", buy_in_count=1, final_chips=500),
        Entrant("P2", buy_in_count=1, final_chips=300),
        Entrant("P3", buy_in_count=1, final_chips=200),
    ]


@pytest.fixture
def big_field():
    """15 groups of a 6600 tournament, 100k starting chips"""
    chips = [400000, 287500, 190000, 166300, 150000, 122100, 60000,
             45000, 40000, 21100, 18000, 0, 0]
    buy_ins = [2, 1, 1, 1, 2, 1, 1, 1, 1, 1, 1, 1, 1]
    return [Entrant(str(100 + i), b, c) for i, (b, c) in enumerate(zip(buy_ins, chips))]