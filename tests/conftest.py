import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from obsidian_cortex.data_models import VaultMetadata

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def vault(tmp_path: Path) -> VaultMetadata:
    root = tmp_path / "vault"
    root.mkdir()
    return VaultMetadata(name="test", path=root.resolve(), description="test vault", exists=True)


@pytest.fixture
def make_note(vault: VaultMetadata):
    """Write raw note text below the vault root and return its absolute path."""

    def _write(relative_path: str, content: str) -> Path:
        note_path = vault.path / relative_path
        note_path.parent.mkdir(parents=True, exist_ok=True)
        note_path.write_text(content, encoding="utf-8")
        return note_path

    return _write


def set_age(path: Path, days: float, now: datetime = FIXED_NOW) -> None:
    """Set a file's modification time to ``days`` before ``now``."""
    stamp = (now - timedelta(days=days)).timestamp()
    os.utime(path, (stamp, stamp))
