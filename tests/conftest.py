"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from divswap.assets.directory import AssetDirectory
from divswap.config import PoolConfig
from divswap.engine import Exchange
from divswap.ledger.dividends import UndistributedPolicy
from divswap.models.events import EventLog
from divswap.models.operations import Scenario
from divswap.pools.pool import Pool
from divswap.pools.registry import Registry
from tests.helpers.constants import GOLD, OWNER, SILVER
from tests.helpers.factories import make_directory, make_pool

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


def load_scenario_fixture(name: str) -> Scenario:
    """Load a scenario fixture by name.

    Args:
        name: Fixture name without extension (e.g., "liquidity_and_swaps")

    Returns:
        Parsed Scenario
    """
    path = SCENARIOS_DIR / f"{name}.json"
    with open(path) as f:
        data = json.load(f)
    return Scenario.model_validate(data)


@pytest.fixture
def assets() -> AssetDirectory:
    """Gold, silver and bronze with starting balances for OWNER, LP1 and SWAPPER."""
    return make_directory()


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def pool(assets: AssetDirectory, events: EventLog) -> Pool:
    """Empty gold/silver pool with the default configuration."""
    return make_pool(assets, GOLD, SILVER, events=events)


@pytest.fixture
def discard_pool(assets: AssetDirectory, events: EventLog) -> Pool:
    """Gold/silver pool that drops profit arriving while no shares exist."""
    return make_pool(
        assets,
        GOLD,
        SILVER,
        events=events,
        config=PoolConfig(undistributed_policy=UndistributedPolicy.DISCARD),
    )


@pytest.fixture
def registry(assets: AssetDirectory, events: EventLog) -> Registry:
    """Registry created by OWNER over the funded asset directory."""
    return Registry(OWNER, assets, events=events)


@pytest.fixture
def exchange() -> Exchange:
    """Empty exchange owned by OWNER (assets are created through operations)."""
    return Exchange(OWNER)
