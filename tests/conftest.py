import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # A rules override or log level from the developer's shell must not leak into tests.
    monkeypatch.delenv("SEEDCRAWL_RULES_FILE", raising=False)
    monkeypatch.delenv("SEEDCRAWL_LOG_LEVEL", raising=False)
