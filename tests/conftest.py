"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from vesper.config import VesperSettings, reset_settings, set_settings
from vesper.storage import InMemoryScriptStore, SQLiteScriptStore

SAMPLE_SCREENPLAY = """\
THE LAST SHIFT

FADE IN:

INT. DINER - NIGHT

Rain hammers the windows. MAYA (30s) wipes the counter.

MAYA
You're late again.

JOE
The bus broke down. I swear!

MAYA
Sure it did...

EXT. PARKING LOT - NIGHT

Joe lights a cigarette under the neon sign.

JOE
Why do I even bother?

INT. DINER KITCHEN - CONTINUOUS

MAYA
I love this place. Don't ask me why.

CUT TO:
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (may need extended timeout)"
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point every test at its own database and fresh settings."""
    db_path = tmp_path / "test_vesper.db"
    monkeypatch.setenv("VESPER_DATABASE_PATH", str(db_path))
    monkeypatch.chdir(tmp_path)
    set_settings(VesperSettings(database_path=db_path))

    yield

    reset_settings()


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_SCREENPLAY


@pytest.fixture
def sample_file(tmp_path) -> Path:
    path = tmp_path / "the_last_shift.txt"
    path.write_text(SAMPLE_SCREENPLAY, encoding="utf-8")
    return path


@pytest.fixture
def memory_store() -> InMemoryScriptStore:
    return InMemoryScriptStore()


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteScriptStore(tmp_path / "store.db").initialize()
    yield store
    store.close()
