"""Shared test fixtures."""
import os
import sys
import pytest
import tempfile

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from models.database import Database
from helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    db = Database(db_path)
    db.connect()
    yield db
    db.close()
    os.unlink(db_path)


@pytest.fixture
def rules_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("""
rules:
  - id: slow
    name: Slow responses
    metric: response_time
    condition: greater_than
    threshold: 1000
    severity: high
    cooldown_minutes: 5
  - id: mem
    name: Memory pressure
    metric: memory_usage
    condition: greater_than
    threshold: 85
    severity: critical
    cooldown_minutes: 10
  - id: quiet
    name: Quiet agent
    metric: log_volume
    condition: less_than
    threshold: 1
    severity: low
    enabled: false
""")
    return path
