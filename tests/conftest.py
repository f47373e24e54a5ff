"""Shared pytest fixtures for movegov tests.

Fixtures are organized by category:
- Path fixtures: Contract and descriptor fixture files
- Source fixtures: Move contracts covering the generation scenarios
- Descriptor fixtures: Normalized package descriptors
- Logging isolation: Resets the package logger between tests
"""

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from movegov.utils.logging import ROOT_LOGGER

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def contracts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the Move contract fixtures."""
    return fixtures_dir / "contracts"


@pytest.fixture
def counter_path(contracts_dir: Path) -> Path:
    """Path to the counter contract (two governable functions and a getter)."""
    return contracts_dir / "counter.move"


@pytest.fixture
def getters_only_path(contracts_dir: Path) -> Path:
    """Path to a contract with no governable functions."""
    return contracts_dir / "getters_only.move"


# =============================================================================
# Source Fixtures
# =============================================================================


@pytest.fixture
def counter_source(counter_path: Path) -> str:
    """Counter contract: increment and set_value are governable, get_value is not."""
    return counter_path.read_text()


@pytest.fixture
def set_value_source() -> str:
    """A single strict-governable function taking one value."""
    return """module pkg::app {
    public struct AppObject has key {
        id: UID,
        value: u64,
    }

    public entry fun set_value(app: &mut AppObject, v: u64) {
        app.value = v;
    }
}
"""


@pytest.fixture
def admin_cap_source() -> str:
    """Two capability-guarded functions sharing one AdminCap object."""
    return """module shop::store {
    public struct Store has key { id: UID, price: u64, paused: bool }

    public struct AdminCap has key, store { id: UID }

    public entry fun update_price(_cap: &AdminCap, store: &mut Store, price: u64) {
        store.price = price;
    }

    public entry fun toggle_pause(cap: &mut AdminCap, store: &mut Store) {
        store.paused = !store.paused;
    }
}
"""


@pytest.fixture
def clock_source() -> str:
    """A governable function that needs the shared clock."""
    return """module auction::house {
    use sui::clock::Clock;

    public struct House has key {
        id: UID,
        deadline: u64,
    }

    public entry fun set_deadline(house: &mut House, deadline: u64, clock: &Clock) {
        house.deadline = deadline + clock::timestamp_ms(clock);
    }
}
"""


@pytest.fixture
def move_2024_source() -> str:
    """A contract using the single-line module header."""
    return """module vault::treasury;

use sui::coin::{Self, Coin};

public struct Treasury has key {
    id: UID,
    limit: u64,
}

public entry fun set_limit(treasury: &mut Treasury, limit: u64) {
    treasury.limit = limit;
}
"""


@pytest.fixture
def getters_only_source(getters_only_path: Path) -> str:
    """A contract whose public functions are all getters."""
    return getters_only_path.read_text()


@pytest.fixture
def no_header_source() -> str:
    """Move-like text without a module header."""
    return """public entry fun set_value(app: &mut AppObject, v: u64) {
    app.value = v;
}
"""


# =============================================================================
# Descriptor Fixtures
# =============================================================================


@pytest.fixture
def campaign_modules(fixtures_dir: Path) -> dict[str, Any]:
    """Normalized descriptor of a published crowdfunding package."""
    return json.loads((fixtures_dir / "descriptors" / "campaign.json").read_text())


@pytest.fixture
def governed_modules(campaign_modules: dict[str, Any]) -> dict[str, Any]:
    """A package that already ships a governance module."""
    modules = dict(campaign_modules)
    modules["governance"] = {
        "address": "0xabc",
        "name": "governance",
        "structs": {},
        "exposedFunctions": {
            "create_proposal": {
                "visibility": "Public",
                "isEntry": True,
                "typeParameters": [],
                "parameters": ["U8"],
                "return": [],
            }
        },
        "enums": {"ProposalKind": {"abilities": {"abilities": ["Drop", "Store"]}}},
    }
    return modules


# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_package_logger() -> Any:
    """Restore the package logger after CLI runs reconfigure it."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
