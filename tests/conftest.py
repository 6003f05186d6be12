from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "PONDER_API_KEY",
        "PONDER_API_BASE",
        "PONDER_MODEL",
        "PONDER_ROUNDS",
        "PONDER_REASONING_MAX_TOKENS",
        "PONDER_HOME",
        "PONDER_LOG_LEVEL",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the repository from leaking into settings.
    monkeypatch.chdir(tmp_path)
