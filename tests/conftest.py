"""Shared test fixtures for connectsquares."""

import pytest

from connectsquares.arena import MatchArena
from connectsquares.config import ArenaConfig, RulesConfig
from connectsquares.core.clock import ManualClock
from connectsquares.core.ledger import Ledger


@pytest.fixture
def tmp_output(tmp_path):
    """Provide a temporary output directory for telemetry."""
    return tmp_path / "output"


@pytest.fixture
def clock():
    # tick 0 and timestamp 0 leave a two-seat roster unshuffled
    return ManualClock(tick=0, timestamp=0)


@pytest.fixture
def ledger():
    return Ledger({"alice": 1000, "bob": 1000, "carol": 1000})


@pytest.fixture
def rules():
    return RulesConfig(rows=3, cols=3, connect=3, wager=10)


@pytest.fixture
def arena(clock, ledger, rules):
    return MatchArena(ArenaConfig(rules=rules), ledger=ledger, clock=clock)
