"""Pytest configuration helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf


def _ensure_repo_on_path() -> None:
    """Allow tests to import from repo modules without installing the package."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()


@pytest.fixture()
def write_bark():
    """Write float samples as a 16-bit WAV, creating parent folders."""

    def _write(path: Path, samples, sample_rate: int = 8000) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(path), np.asarray(samples, dtype=np.float32), sample_rate, subtype="PCM_16")
        return path

    return _write
