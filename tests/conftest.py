"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from skillkeep.db.database import create_db_engine, init_db  # noqa: E402
from skillkeep.skillgraph import Skill, SkillGraph  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite file database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)



@pytest.fixture
def engine(tmp_path):
    """Fresh file-backed SQLite database with all tables created."""
    eng = create_db_engine(f"sqlite:///{tmp_path / 'progress.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def skill_graph():
    """
    Small curriculum:

        count -> add-1 -> add-2 -> add-3
                 sub-1 -> sub-2
        count -> sub-1
    """
    return SkillGraph(
        [
            Skill("count", "Counting"),
            Skill("add-1", "1-Digit Addition", ("count",)),
            Skill("add-2", "2-Digit Addition", ("add-1",)),
            Skill("add-3", "3-Digit Addition", ("add-2",)),
            Skill("sub-1", "1-Digit Subtraction", ("count",)),
            Skill("sub-2", "2-Digit Subtraction", ("sub-1", "add-1")),
        ]
    )
