import sys
from pathlib import Path

import pytest

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from core.config import AppSettings  # noqa: E402


@pytest.fixture
def settings() -> AppSettings:
    """Deterministic settings: no .env files, short provider timeout."""
    return AppSettings(_env_file=None, provider_timeout_seconds=1.0, fanout=False)
