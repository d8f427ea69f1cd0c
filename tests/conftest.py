import sys
from pathlib import Path

# Ensure the project root is on sys.path so `symbolic_algebra` is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from symbolic_algebra import config, logging_system


@pytest.fixture(autouse=True)
def _fresh_engine_state(monkeypatch):
    for name in ("MAX_ITERATIONS", "MAX_SOLVE_DEPTH", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv("SYMBOLIC_ALGEBRA_" + name, raising=False)
    config.reset_config()
    logging_system._global_logger = None
    yield
    config.reset_config()
    logging_system._global_logger = None
