"""Five-number loudness summary over a waveform."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .types import LoudnessSummary


def summarize_amplitude(samples: np.ndarray) -> Optional[LoudnessSummary]:
    """Positional quartiles of ``|samples|``: ``sorted[n//4]``, ``sorted[n//2]``, ``sorted[3n//4]``.

    Indexing is integer floor on the sorted magnitudes with no interpolation;
    the timeline's box plots are drawn from exactly these values. Returns
    ``None`` for an empty input.
    """
    magnitudes = np.abs(np.asarray(samples, dtype=np.float64).ravel())
    count = magnitudes.size
    if count == 0:
        return None
    ordered = np.sort(np.clip(magnitudes, 0.0, 1.0))
    return LoudnessSummary(
        minimum=float(ordered[0]),
        q1=float(ordered[count // 4]),
        median=float(ordered[count // 2]),
        q3=float(ordered[(3 * count) // 4]),
        maximum=float(ordered[count - 1]),
    )


__all__ = ["summarize_amplitude"]
